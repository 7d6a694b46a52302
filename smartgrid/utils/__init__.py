"""
Utilities
=========

Cross-cutting helpers:
- logging: loguru sink setup for command-line runs
- validation: numeric checks for MW quantities
"""

from .validation import is_finite_number, is_number

__all__ = ["is_finite_number", "is_number"]
