"""In-memory lookup of person and place records by name."""
