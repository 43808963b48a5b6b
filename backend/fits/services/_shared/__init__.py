"""Primitives shared across services: base class, errors, ports."""
