# link_warden/__init__.py
"""
LinkWarden package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from link_warden.cli import cli  # noqa: E402

__all__ = ["__version__", "cli"]
