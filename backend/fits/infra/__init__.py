"""Infrastructure adapters (token signing)."""
