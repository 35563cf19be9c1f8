"""Shared utilities: logging setup and tree rendering."""
