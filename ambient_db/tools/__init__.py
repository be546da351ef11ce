"""Command-line tools for ambient-db."""
