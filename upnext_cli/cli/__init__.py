"""
Command-Line Layer.

Typer commands and the Rich formatters that render the reading list.
"""
