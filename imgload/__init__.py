"""Readers for XPM and XV thumbnail images and an anti-aliased vector shape rasterizer."""

__version__ = "0.1.0"