"""Transcript analysis endpoint."""
