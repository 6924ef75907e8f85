"""inksplit: CMYK plate separation, print effects and duotone recoloring."""

from pathlib import Path

_VERSION_FILE = Path(__file__).parent / "VERSION"

# VERSION ships as package data; a bare checkout without it is a dev build
__version__ = (
    _VERSION_FILE.read_text().strip() if _VERSION_FILE.exists() else "0.0.0-dev"
)
