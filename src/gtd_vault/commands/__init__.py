"""CLI commands for GTD Vault."""
