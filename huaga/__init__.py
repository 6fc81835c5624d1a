"""Huaga: a small image viewer with a differential scroll-wheel zoom."""

__version__ = "0.1.0"
