"""Command-line interface and interactive REPL."""
