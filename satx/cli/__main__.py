"""
Entry point for running satx as a module.

Usage:
    python -m satx.cli practice math
    python -m satx.cli dashboard
    python -m satx.cli --help
"""
from .practice_cli import main

if __name__ == "__main__":
    main()
