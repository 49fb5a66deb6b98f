"""Typer-based ``ledgersync`` command line interface."""
