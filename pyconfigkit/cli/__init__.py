"""
Command-line interface for pyconfigkit.

Usage: pyconfigkit [show|list] [options]
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
