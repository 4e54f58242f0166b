"""Utility helpers shared across MediaShelf."""
