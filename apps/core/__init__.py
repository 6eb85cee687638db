"""Shared Brazilian document validation, formatting and input sanitization."""
