"""Locate bundled configuration files.

Development checkouts keep ``config/`` at the project root; an installed
package falls back to the current working directory.
"""

from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


def get_config_dir() -> Path:
    """Return the directory holding ``drone.yaml`` and ``logging.yaml``."""
    candidates = [
        _PROJECT_ROOT / "config",  # src/fpvdrone/core -> root
        Path.cwd() / "config",
    ]
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    return candidates[-1]


def get_config_path(relative: str) -> Path:
    """Return the path of a file inside the config directory.

    Args:
        relative: Path relative to the config directory (e.g. "drone.yaml").
    """
    return get_config_dir() / relative
