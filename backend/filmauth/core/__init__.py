"""Cross-cutting application infrastructure: config, logging, errors, extensions."""
