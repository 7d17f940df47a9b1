from __future__ import annotations

import streamlit as st

from core.config import configure_logging

configure_logging()

st.set_page_config(page_title="Waste Tracker", page_icon="📉", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📊_Dashboard.py", title="Dashboard", icon="📊"),
    st.Page("pages/2_📋_Records.py", title="Records", icon="📋"),
    st.Page("pages/3_➕_New_Record.py", title="New Record", icon="➕"),
    st.Page("pages/4_📄_Reports.py", title="Reports", icon="📄"),
    st.Page("pages/5_⚙️_Admin.py", title="Admin", icon="⚙️"),
    st.Page("pages/6_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
