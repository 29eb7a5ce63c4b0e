"""Command-line interface for Notion content sync.

This package provides the `notion-sync` CLI tool that runs incremental sync
passes of a Notion database into a local content store, with YAML
configuration, Rich terminal output and exit codes per failure type.
"""

from .sync_command import SyncCommand
from .config import ConfigLoader
from .models import ExitCode, SyncConfig
from .errors import (
    CLIError,
    ConfigError,
    ConfigNotFoundError,
    FilesystemError,
)

__all__ = [
    'SyncCommand',
    'ConfigLoader',
    'ExitCode',
    'SyncConfig',
    'CLIError',
    'ConfigError',
    'ConfigNotFoundError',
    'FilesystemError',
]
