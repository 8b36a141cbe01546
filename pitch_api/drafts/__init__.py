"""LLM-backed rubric drafting endpoints."""
