"""Arbor subcommands, one module per command."""
