"""Shared utilities for pixelfit."""
