"""Typer CLI for mcsync."""
