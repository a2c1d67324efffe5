"""
Entry point for running the bootstrap as a module.

Usage:
    python -m unified_bootstrap run
"""

from unified_bootstrap.cli import main

if __name__ == "__main__":
    main()
