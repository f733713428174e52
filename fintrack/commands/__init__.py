"""Command parsing package."""

from fintrack.commands.parser import (
    CommandParseError,
    CommandParser,
    CommandType,
    ParsedCommand,
    parse_command,
)

__all__ = [
    "CommandParseError",
    "CommandParser",
    "CommandType",
    "ParsedCommand",
    "parse_command",
]
