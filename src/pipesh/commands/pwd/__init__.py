"""pwd command."""
