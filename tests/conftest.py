"""Shared pytest configuration."""

import os

# pygame must not try to open a real display or audio device during tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
