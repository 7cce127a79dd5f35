# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation on first startup
- db: Database configuration and connection management
- errors: API error types and the JSON error envelope handlers
- security: Token signing/verification and password hashing
- seed: Sample catalog data for development
- slug: URL slug derivation
"""
