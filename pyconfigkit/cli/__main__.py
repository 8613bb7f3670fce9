"""
Entry point for running the pyconfigkit CLI as a module.

Usage: python -m pyconfigkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
