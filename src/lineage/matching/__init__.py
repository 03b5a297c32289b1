"""Fuzzy duplicate matching and conflict detection for session persons."""
