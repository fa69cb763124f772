"""HTTP clients for upstream services."""
