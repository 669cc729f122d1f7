"""Anthropic-backed upstream document generator."""
