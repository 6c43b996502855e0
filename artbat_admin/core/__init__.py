"""
Core utilities shared across the admin backend.

- configuration (env vars, storage backend selection)
- password hashing and login rate limiting
- logging setup
"""
