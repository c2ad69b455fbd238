"""CLI package for interacting with the farm registry service."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer instance stays in ``cli.app`` so tests can patch ``cli.app.ApiClient``
# without the package attribute shadowing the module.

__all__ = []
