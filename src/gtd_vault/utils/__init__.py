"""Utility helpers for GTD Vault."""
