"""Textual host for the command palette."""
