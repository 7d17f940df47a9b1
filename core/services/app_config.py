from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from core.db import q, x
from core.errors import DuplicateNameError, ValidationError
from core.utils import iso_now

logger = logging.getLogger(__name__)

CONFIG_ID = "settings"

DEFAULT_CATEGORIES = [
    "Usadas sin control de inventario",
    "Mermas restaurantes",
    "Mermas Bodega",
]
DEFAULT_BRANCHES = [
    "Atitlán Central",
    "Atitlán Mirador",
    "Atitlán San Juan",
    "Atitlán Santiago",
    "Atitlán Café",
    "Atitlán Café Bar",
    "Bodega Central",
]
DEFAULT_WASTE_THRESHOLD = 0.03


@dataclass
class AppConfig:
    categories: list[str] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)
    monthly_sales: dict[str, float] = field(default_factory=dict)
    waste_threshold: float = DEFAULT_WASTE_THRESHOLD

    def to_doc(self) -> dict[str, Any]:
        return {
            "categories": list(self.categories),
            "branches": list(self.branches),
            "monthlySales": dict(self.monthly_sales),
            "wasteThreshold": self.waste_threshold,
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> "AppConfig":
        # Missing keys fall back to the defaults, field by field.
        default = default_config()

        def pick(key: str, fallback):
            value = doc.get(key)
            return fallback if value is None else value

        return cls(
            categories=list(pick("categories", default.categories)),
            branches=list(pick("branches", default.branches)),
            monthly_sales=dict(pick("monthlySales", default.monthly_sales)),
            waste_threshold=pick("wasteThreshold", default.waste_threshold),
        )


def default_config() -> AppConfig:
    return AppConfig(
        categories=list(DEFAULT_CATEGORIES),
        branches=list(DEFAULT_BRANCHES),
        monthly_sales={b: 0.0 for b in DEFAULT_BRANCHES},
        waste_threshold=DEFAULT_WASTE_THRESHOLD,
    )


def _dedupe(names: list[str]) -> list[str]:
    out: list[str] = []
    for n in names:
        s = str(n).strip()
        if s and s not in out:
            out.append(s)
    return out


def _validate_sales(value: Any, branch: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Monthly sales for '{branch}' must be a number.")
    if not math.isfinite(v) or v < 0:
        raise ValidationError(f"Monthly sales for '{branch}' must be a finite number, zero or greater.")
    return v


def _validate_threshold(value: Any) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Waste threshold must be a number.")
    if not 0.0 <= v <= 1.0:
        raise ValidationError("Waste threshold must be between 0 and 1.")
    return v


def normalize_config(cfg: AppConfig) -> AppConfig:
    """
    Keep monthly_sales keyed by exactly the branch list: branches without a
    figure get 0, figures for removed branches are dropped.
    """
    branches = _dedupe(cfg.branches)
    sales = {b: _validate_sales(cfg.monthly_sales.get(b, 0.0), b) for b in branches}
    return AppConfig(
        categories=_dedupe(cfg.categories),
        branches=branches,
        monthly_sales=sales,
        waste_threshold=_validate_threshold(cfg.waste_threshold),
    )


def get_config(conn) -> Optional[AppConfig]:
    rows = q(conn, "SELECT doc FROM app_config WHERE id=?", (CONFIG_ID,))
    if not rows:
        return None
    return AppConfig.from_doc(json.loads(rows[0]["doc"]))


def _write_config(conn, cfg: AppConfig) -> AppConfig:
    cfg = normalize_config(cfg)
    x(
        conn,
        """
        INSERT INTO app_config (id, doc, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET doc=excluded.doc, updated_at=excluded.updated_at
        """,
        (CONFIG_ID, json.dumps(cfg.to_doc(), ensure_ascii=False), iso_now()),
    )
    return cfg


def load_config(conn) -> AppConfig:
    cfg = get_config(conn)
    if cfg is None:
        logger.info("No configuration found, writing defaults")
        return _write_config(conn, default_config())
    return cfg


def upsert_config(conn, partial: dict[str, Any], *, merge: bool = True) -> AppConfig:
    """
    Write a partial config document (camelCase keys, as stored).
    With merge=True unspecified keys keep their current values.
    """
    unknown = set(partial) - {"categories", "branches", "monthlySales", "wasteThreshold"}
    if unknown:
        raise ValidationError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    base = load_config(conn).to_doc() if merge else default_config().to_doc()
    base.update(partial)
    cfg = _write_config(conn, AppConfig.from_doc(base))
    logger.info("Configuration updated: %s", ", ".join(sorted(partial)) or "(none)")
    return cfg


# ---- administrative actions ----

def add_category(conn, name: str) -> AppConfig:
    name = str(name or "").strip()
    if not name:
        raise ValidationError("Category name is required.")
    cfg = load_config(conn)
    if name in cfg.categories:
        logger.warning("Rejected duplicate category %r", name)
        raise DuplicateNameError("category", name)
    return upsert_config(conn, {"categories": cfg.categories + [name]})


def remove_category(conn, name: str) -> AppConfig:
    cfg = load_config(conn)
    return upsert_config(conn, {"categories": [c for c in cfg.categories if c != name]})


def add_branch(conn, name: str, monthly_sales: float = 0.0) -> AppConfig:
    name = str(name or "").strip()
    if not name:
        raise ValidationError("Branch name is required.")
    cfg = load_config(conn)
    if name in cfg.branches:
        logger.warning("Rejected duplicate branch %r", name)
        raise DuplicateNameError("branch", name)
    sales = dict(cfg.monthly_sales)
    sales[name] = _validate_sales(monthly_sales, name)
    return upsert_config(conn, {"branches": cfg.branches + [name], "monthlySales": sales})


def remove_branch(conn, name: str) -> AppConfig:
    # Existing records for the branch are kept.
    cfg = load_config(conn)
    sales = {b: v for b, v in cfg.monthly_sales.items() if b != name}
    return upsert_config(conn, {"branches": [b for b in cfg.branches if b != name], "monthlySales": sales})


def set_monthly_sales(conn, edits: dict[str, float]) -> AppConfig:
    cfg = load_config(conn)
    unknown = [b for b in edits if b not in cfg.branches]
    if unknown:
        raise ValidationError(f"Unknown branch: {', '.join(unknown)}")
    sales = dict(cfg.monthly_sales)
    for branch, value in edits.items():
        sales[branch] = _validate_sales(value, branch)
    return upsert_config(conn, {"monthlySales": sales})


def set_waste_threshold(conn, threshold: float) -> AppConfig:
    return upsert_config(conn, {"wasteThreshold": _validate_threshold(threshold)})
