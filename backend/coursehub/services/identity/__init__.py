"""Credential-change protocol (profile and password updates)."""
