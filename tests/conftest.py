"""Shared pytest fixtures: in-memory row store and API client."""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter

# Make the project root importable without installation
_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from portal.api import create_app  # noqa: E402
from portal.db import RowStore  # noqa: E402

IN_MEMORY_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def store():
    row_store = RowStore(IN_MEMORY_URL)
    await row_store.open(create_all=True)
    yield row_store
    await row_store.close()


@pytest.fixture
def client():
    app = create_app(RowStore(IN_MEMORY_URL))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def blank_pdf() -> bytes:
    """A valid one-page PDF with no text layer."""
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()
