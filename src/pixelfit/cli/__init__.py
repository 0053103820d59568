"""CLI module for pixelfit.

Provides the command-line interface for resizing images to a target
file size, physical cropping and crop previews.
"""

from __future__ import annotations

from pixelfit.cli.main import Unit, app

__all__ = ["Unit", "app"]
