"""Utilities for testing the package, not imported by default."""
