"""
Classes router package.

Exports the router for class scheduling endpoints.
"""

from .classes_router import router

__all__ = ["router"]
