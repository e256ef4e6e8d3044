"""Shared helpers: error hierarchy and the LLM transport."""
