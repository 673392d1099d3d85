"""MindSpace journal service: entries, AI reflections and mood analytics."""

__version__ = "1.0.0"
