# content_scout/__init__.py
"""
ContentScout package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Exposed under another name so ``content_scout.cli`` stays the submodule.
from content_scout.cli import cli as main_cli  # noqa: E402
