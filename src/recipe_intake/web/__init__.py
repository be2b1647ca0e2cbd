"""HTTP API for recipe import."""
