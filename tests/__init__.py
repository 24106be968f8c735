"""
SuperREST Test Suite.

This package contains:
- unit/: Unit tests (no I/O)
- integration/: Integration tests (SQLite files, FastAPI TestClient)
"""
