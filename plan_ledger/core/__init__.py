"""Core billing logic."""
