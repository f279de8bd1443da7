"""
Utility functions for core_backend.
"""
from .codes import generate_code

__all__ = ["generate_code"]
