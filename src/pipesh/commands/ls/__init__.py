"""ls command."""
