"""Web application for MediaShelf."""
