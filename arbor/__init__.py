"""Arbor — a local version-control engine with branches, merge and rebase."""
