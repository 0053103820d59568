"""pixelfit: fit images to a target file size or an exact physical crop."""

__version__ = "0.1.0"
