"""Pydantic schemas for MediaShelf payloads."""
