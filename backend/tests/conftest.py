"""
FaceReader Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before any facereader import so the
       module-level singletons (settings, services, engine) pick them up.

Fixtures:
    ├── mock_db_session:   AsyncMock standing in for AsyncSession
    ├── temp_storage:      Fresh storage directory per test
    ├── sample_image_bytes / sample_png_bytes / sample_heic_header
    ├── mock_llm:          AsyncMock LLMService
    └── test_client:       HTTPX AsyncClient over ASGITransport
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before facereader.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="facereader_test_")
os.environ["PROMPTS_DIR"] = str(Path(__file__).resolve().parent.parent / "prompts")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["RETRY_MAX_ATTEMPTS"] = "2"
os.environ["RETRY_MIN_WAIT"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI. Passes MIME detection only."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest.fixture
def sample_png_bytes():
    """A real 2x2 PNG produced with Pillow."""
    import io
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (2, 2), color=(200, 100, 50)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_heic_header():
    """ftyp box of an iPhone HEIC file (brand 'heic'); the body is not decodable."""
    return b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00mif1heic" + b"\x00" * 32


@pytest.fixture
def mock_llm():
    llm = AsyncMock()
    llm.analyze = AsyncMock()
    llm.health_check = AsyncMock(return_value=True)
    return llm


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Dependency overrides set on `app` inside a test are cleared afterwards.
    """
    from facereader.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
