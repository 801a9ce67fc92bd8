"""
Careers Site Backend: Application Package
===========================================

Architecture:

    ┌─────────────────────────────────────┐
    │     Routes (API + landing page)     │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (intake pipeline)      │  ← upload, validation, mail
    ├─────────────────────────────────────┤
    │     Schemas (in-memory data)        │  ← Pydantic, nothing persisted
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
