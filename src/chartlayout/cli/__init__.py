"""Command-line interface for chartlayout."""
