"""
Armory API — Application Package
==================================

A small CRUD API exposing relational tables (swords, potions) over HTTP.

Architecture:

    ┌─────────────────────────────────────┐
    │      Routes (Resource Router)       │  ← HTTP verbs, status codes
    ├─────────────────────────────────────┤
    │     Services (Resource Gateway)     │  ← one storage call per request
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine and pool
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
