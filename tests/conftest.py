from __future__ import annotations

import pytest

from core.db import connect, ensure_schema
from core.services.records import WasteRecord


@pytest.fixture
def conn(tmp_path):
    c = connect(tmp_path / "test.db")
    ensure_schema(c)
    yield c
    c.close()


_seq = iter(range(1, 1_000_000))


def make_record(**kwargs) -> WasteRecord:
    """WasteRecord with throwaway defaults; override what the test cares about."""
    n = next(_seq)
    defaults = {
        "id": f"rec-{n}",
        "branch": "A",
        "category": "Mermas Bodega",
        "code": "",
        "inventory_number": "",
        "description": "",
        "date": "2024-01-15",
        "value": 0.0,
        "notes": "",
        "created_at": "2024-01-15T12:00:00+00:00",
    }
    defaults.update(kwargs)
    return WasteRecord(**defaults)
