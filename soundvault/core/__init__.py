"""Cross-cutting infrastructure: settings, logging, errors, database."""
