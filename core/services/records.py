from __future__ import annotations

import logging
import math
import re
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.db import q, x
from core.errors import NotFoundError, ValidationError
from core.utils import iso_now

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SORT_FIELDS = ("date", "value", "branch", "category")


@dataclass(frozen=True)
class WasteRecord:
    id: str
    branch: str
    category: str
    code: str
    inventory_number: str
    description: str
    date: str
    value: float
    notes: str
    created_at: str


@dataclass
class NewWasteRecord:
    branch: str
    category: str
    date: str
    value: Optional[float]
    code: str = ""
    inventory_number: str = ""
    description: str = ""
    notes: str = ""


def _clean(s: Optional[str]) -> str:
    return str(s).strip() if s is not None else ""


def _row_to_record(r) -> WasteRecord:
    return WasteRecord(
        id=str(r["id"]),
        branch=r["branch"] or "",
        category=r["category"] or "",
        code=r["code"] or "",
        inventory_number=r["inventory_number"] or "",
        description=r["description"] or "",
        date=r["date"] or "",
        value=float(r["value"] or 0),
        notes=r["notes"] or "",
        created_at=r["created_at"] or "",
    )


def validate_new_record(rec: NewWasteRecord) -> NewWasteRecord:
    """
    Client-side checks before any write. Returns a cleaned copy.
    Branch, category, date and a non-negative numeric value are required.
    """
    branch = _clean(rec.branch)
    category = _clean(rec.category)
    rec_date = _clean(rec.date)

    if not branch:
        raise ValidationError("Branch is required.")
    if not category:
        raise ValidationError("Category is required.")
    if not DATE_RE.match(rec_date):
        raise ValidationError("Date must be in YYYY-MM-DD format.")
    try:
        date.fromisoformat(rec_date)
    except ValueError:
        raise ValidationError(f"'{rec_date}' is not a calendar date.")
    if rec.value is None:
        raise ValidationError("Value is required.")
    try:
        value = float(rec.value)
    except (TypeError, ValueError):
        raise ValidationError("Value must be a number.")
    if not math.isfinite(value) or value < 0:
        raise ValidationError("Value must be a finite number, zero or greater.")

    return NewWasteRecord(
        branch=branch,
        category=category,
        date=rec_date,
        value=value,
        code=_clean(rec.code),
        inventory_number=_clean(rec.inventory_number),
        description=_clean(rec.description),
        notes=_clean(rec.notes),
    )


def list_records(conn) -> list[WasteRecord]:
    rows = q(conn, "SELECT * FROM waste_records ORDER BY date DESC, created_at DESC")
    return [_row_to_record(r) for r in rows]


def get_record(conn, record_id: str) -> Optional[WasteRecord]:
    rows = q(conn, "SELECT * FROM waste_records WHERE id=?", (record_id,))
    return _row_to_record(rows[0]) if rows else None


def insert_record(conn, rec: NewWasteRecord) -> WasteRecord:
    clean = validate_new_record(rec)
    record = WasteRecord(
        id=uuid.uuid4().hex,
        branch=clean.branch,
        category=clean.category,
        code=clean.code,
        inventory_number=clean.inventory_number,
        description=clean.description,
        date=clean.date,
        value=float(clean.value),
        notes=clean.notes,
        created_at=iso_now(),
    )
    x(
        conn,
        """
        INSERT INTO waste_records
          (id, branch, category, code, inventory_number, description, date, value, notes, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            record.id,
            record.branch,
            record.category,
            record.code,
            record.inventory_number,
            record.description,
            record.date,
            record.value,
            record.notes,
            record.created_at,
        ),
    )
    logger.info("Inserted waste record %s (%s, %s, %.2f)", record.id, record.branch, record.date, record.value)
    return record


def delete_record(conn, record_id: str) -> None:
    n = x(conn, "DELETE FROM waste_records WHERE id=?", (record_id,))
    if n == 0:
        raise NotFoundError("Record not found.")
    logger.info("Deleted waste record %s", record_id)


def sort_records(records: list[WasteRecord], field: str = "date", descending: bool = True) -> list[WasteRecord]:
    if field not in SORT_FIELDS:
        raise ValidationError(f"Cannot sort by '{field}'.")
    return sorted(records, key=lambda r: getattr(r, field), reverse=descending)
