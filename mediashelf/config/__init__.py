"""Configuration and database setup for MediaShelf."""
