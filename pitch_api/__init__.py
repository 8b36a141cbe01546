"""FastAPI service exposing the pitch rubric pipeline."""
