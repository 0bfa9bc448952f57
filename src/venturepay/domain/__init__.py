"""Domain layer: models, ports and webhook services (no framework imports)."""
