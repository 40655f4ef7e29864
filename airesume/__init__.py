"""Client for the AI Resume recruitment platform."""
from airesume.config import APP_VERSION as __version__

__all__ = ["__version__"]
