SCHEMA_SQL = r"""
-- Waste events (append-only; rows are deleted, never updated)
CREATE TABLE IF NOT EXISTS waste_records (
  id TEXT PRIMARY KEY,                   -- store-assigned uuid hex
  branch TEXT NOT NULL,
  category TEXT NOT NULL,
  code TEXT NOT NULL DEFAULT '',
  inventory_number TEXT NOT NULL DEFAULT '',
  description TEXT NOT NULL DEFAULT '',
  date TEXT NOT NULL,                    -- ISO date YYYY-MM-DD
  value REAL NOT NULL DEFAULT 0,
  notes TEXT NOT NULL DEFAULT '',
  created_at TEXT NOT NULL               -- ISO datetime (UTC)
);

CREATE INDEX IF NOT EXISTS idx_waste_records_date ON waste_records(date);

-- Singleton configuration document (JSON payload)
CREATE TABLE IF NOT EXISTS app_config (
  id TEXT PRIMARY KEY,
  doc TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
"""
