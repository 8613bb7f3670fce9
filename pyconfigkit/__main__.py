"""
Entry point for running pyconfigkit CLI as a module.

Usage: python -m pyconfigkit [command] [options]
"""

from pyconfigkit.cli.parser import main

if __name__ == "__main__":
    main()
