"""Stored rubrics and templates."""
