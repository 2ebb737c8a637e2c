"""Stub tools with fixed outputs."""
