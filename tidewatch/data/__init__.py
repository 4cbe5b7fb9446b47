"""Graph and projection data sources."""
