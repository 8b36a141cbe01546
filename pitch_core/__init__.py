"""Rubric drafting pipeline for pitch practice: prompts, completion, JSON extraction and validation."""
