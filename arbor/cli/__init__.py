"""Arbor command-line interface."""
