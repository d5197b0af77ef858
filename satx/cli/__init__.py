"""Terminal front-end for the adaptive practice engine."""

from .practice_cli import app, main

__all__ = ["app", "main"]
