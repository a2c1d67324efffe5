"""
Entry point for running the relayer as a module.

Usage:
    python -m unified_relayer
"""

from unified_relayer.cli import main

if __name__ == "__main__":
    main()
