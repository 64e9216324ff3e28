"""Rendering and baseline comparison collaborators."""
