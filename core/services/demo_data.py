from __future__ import annotations

import logging
import random
from datetime import date, timedelta

from core.db import ensure_schema
from core.errors import ValidationError
from core.services.app_config import load_config, set_monthly_sales
from core.services.records import NewWasteRecord, insert_record

logger = logging.getLogger(__name__)

DEMO_ITEMS = [
    ("BEB-010", "Agua pura 600ml", "Vencido"),
    ("PAN-002", "Pan de manteca", "Sobrante del día"),
    ("LAC-031", "Leche entera 1L", "Cadena de frío rota"),
    ("CAR-114", "Pechuga de pollo", "Mal estado"),
    ("VER-007", "Tomate", ""),
    ("VAJ-220", "Vaso de vidrio", "Quebrado en servicio"),
]


def _months_ago(today: date, back: int) -> date:
    idx = today.year * 12 + (today.month - 1) - back
    return date(idx // 12, idx % 12 + 1, 1)


def upsert_reference_data(conn) -> None:
    ensure_schema(conn)
    load_config(conn)


def wipe_all(conn) -> None:
    # Keep schema, delete data. The config row is rebuilt from defaults on next load.
    for t in ["waste_records", "app_config"]:
        conn.execute(f"DELETE FROM {t};")
    conn.commit()
    logger.info("All data wiped")


def load_demo_data(conn, *, seed: int = 7, months: int = 6, per_month: int = 25) -> int:
    random.seed(seed)
    upsert_reference_data(conn)
    cfg = load_config(conn)
    if not cfg.branches or not cfg.categories:
        raise ValidationError("Configure at least one branch and one category first.")

    # Give every branch a sales figure so budget status has something to compare against
    set_monthly_sales(conn, {b: float(random.randrange(40_000, 150_000, 5_000)) for b in cfg.branches})

    n = 0
    for back in range(months):
        month_start = _months_ago(date.today(), back)
        for _ in range(per_month):
            code, description, notes = random.choice(DEMO_ITEMS)
            rec_date = min(month_start + timedelta(days=random.randint(0, 27)), date.today())
            insert_record(
                conn,
                NewWasteRecord(
                    branch=random.choice(cfg.branches),
                    category=random.choice(cfg.categories),
                    date=rec_date.isoformat(),
                    value=round(random.uniform(5, 450), 2),
                    code=code,
                    inventory_number=f"INV-{random.randint(1000, 9999)}",
                    description=description,
                    notes=notes,
                ),
            )
            n += 1

    logger.info("Loaded %d demo waste records", n)
    return n
