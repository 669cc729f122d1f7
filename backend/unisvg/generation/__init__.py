"""Tiered generation with retry, classification and fallbacks."""
