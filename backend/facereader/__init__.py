"""
FaceReader Backend — Application Package Initializer
=====================================================

What: Marks the `facereader` directory as a Python package.
Why:  Enables module imports like `from facereader.config import settings`.
Who:  Used by uvicorn, Alembic, and pytest.

Architecture Note:
    The backend is layered so that the one piece of reusable logic, the
    AI-response normalizer, has no knowledge of HTTP, storage, or the model:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← multipart parsing, envelopes
    ├─────────────────────────────────────┤
    │         Services (Orchestration)    │  ← storage, HEIC, Gemini, DB
    ├─────────────────────────────────────┤
    │   Analysis (Normalization Core)     │  ← fences → JSON → schema → fallback
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
