"""Small helpers: identifiers, filenames and slugs."""
