"""
Teacher Dashboard Backend — Application Package Initializer
============================================================

What: Marks the `dashboard` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │     Routes + Auth Gates (API)       │  ← HTTP concerns, token and role checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation rules, transactions, error mapping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy table + Pydantic contracts
    ├─────────────────────────────────────┤
    │     Database (Persistence Gateway)  │  ← one SQLite connection, parameterized SQL
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
