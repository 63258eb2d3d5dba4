"""
Daily Diet Backend — Application Package Initializer
=====================================================

What: Marks the `dailydiet` directory as a Python package.
Why:  Enables module imports like `from dailydiet.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows the same layered architecture throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (Store, Summary, Valid.)  │  ← Ownership rules, streak math
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Database object, async sessions
    └─────────────────────────────────────┘

    Routes never touch SQL, and the summary math never touches the database.
"""

__version__ = "1.0.0"
