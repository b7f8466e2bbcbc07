"""grep command."""
