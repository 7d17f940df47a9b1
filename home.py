from __future__ import annotations

import streamlit as st

from core.config import get_settings
from core.db import get_conn, ensure_schema
from core.services.demo_data import upsert_reference_data

st.set_page_config(page_title="Waste Tracker", page_icon="📉", layout="wide")

st.title("📉 Waste Tracker")
st.caption("Record inventory waste per branch and compare it against monthly sales thresholds.")

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)
upsert_reference_data(conn)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

st.info(
    "Use the left sidebar navigation. Configure branches, categories and monthly sales under **⚙️ Admin**, "
    "log waste in **New Record**, then follow it on the **Dashboard**. **🧪 Data Management** can load demo data.",
    icon="ℹ️",
)
