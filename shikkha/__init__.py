"""Shikkha - real-time video lesson catalog."""

__version__ = "0.1.0"
