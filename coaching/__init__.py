"""Class scheduling and enrollment service for a coaching institute."""

__version__ = "0.1.0"
