"""Version information for fpvdrone.

Reads the VERSION file in the project root when running from a checkout,
with a fallback for installed distributions.
"""

from pathlib import Path

__version__ = "0.1.0"  # Fallback version


def get_version() -> str:
    """Get the current version string.

    Returns:
        Version string (e.g., "0.1.0").
    """
    version_paths = [
        Path(__file__).parent.parent.parent / "VERSION",  # src/fpvdrone -> root
        Path("VERSION"),
    ]

    for version_path in version_paths:
        if version_path.is_file():
            text = version_path.read_text(encoding="utf-8").strip()
            if text:
                return text

    return __version__
