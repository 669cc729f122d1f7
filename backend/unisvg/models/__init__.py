"""Pydantic models for documents, reports and API payloads."""
