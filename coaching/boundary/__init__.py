"""Boundary adapters (persistence)."""
