"""CLI package for querying the temperature ingestion service."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer application lives in ``cli.app``. It is not re-exported from the
# package root so that ``cli.app`` keeps resolving to the module, which the
# tests patch attributes on.

__all__ = []
