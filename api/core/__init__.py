"""
Core utilities shared across the tracker API.

This package hosts configuration helpers (env vars, feature flags), logging
setup, password hashing and the rate limit helper used by the auth routes.
Routers and stores depend on these primitives instead of reading os.environ
directly.
"""
