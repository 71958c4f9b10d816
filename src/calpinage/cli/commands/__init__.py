"""CLI command implementations for the calpinage application.

This package contains subcommands for the calpinage CLI, including:
- validate: Check a piece list without optimizing
- template: Write an example piece list
"""

from calpinage.cli.commands.template import template_command
from calpinage.cli.commands.validate import validate_command

__all__ = ["template_command", "validate_command"]
