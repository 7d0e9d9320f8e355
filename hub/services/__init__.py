"""
High-level use cases for the Volunteer Hub backend.

Each service module orchestrates JSON stores to implement business rules
(register, log in, maintain a profile, publish a workshop, apply to it).

Callers (an HTTP layer, scripts, tests) should use these services instead of
manipulating the JSON documents directly.
"""
