"""
Core utilities shared across the Volunteer Hub backend.

This package hosts:
- configuration helpers (env vars, data directory, lock tuning)
- logging setup for the command line scripts
- password hashing and session token helpers

Services and repositories depend on these primitives instead of reading the
environment themselves.
"""
