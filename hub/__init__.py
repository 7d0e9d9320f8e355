"""Volunteer Hub backend: JSON document storage and the services built on it."""
