"""Core library logic."""
