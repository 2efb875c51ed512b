"""Command-line entry points (`swap-deal`)."""
