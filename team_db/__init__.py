"""Pooled PostgreSQL access for the team management app."""
