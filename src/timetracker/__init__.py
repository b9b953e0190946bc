"""Time tracking & project management dashboard."""

__version__ = "1.0.0"
