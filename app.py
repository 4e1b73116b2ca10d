import base64
import logging

import pandas as pd
import streamlit as st

from services.config import get_qr_config
from services.converter import run_batch
from services.errors import ConversionError, MissingInputError
from services.qr_service import Theme

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Token QR Generator", page_icon="🔳", layout="centered")

config = get_qr_config()

# ---------------- Session state ----------------
if "result" not in st.session_state:
    st.session_state["result"] = None

# ---------------- UI ----------------
st.title("🔳 Token QR Generator (Spreadsheet → ZIP)")
st.caption(
    f"Every cell starting with TG_ becomes a captioned QR code linking to "
    f"{config['base_url']}<token> • files saved as .{config['extension']}"
)

uploaded_file = st.file_uploader(
    "Upload spreadsheet",
    type=["xlsx", "xls", "csv"],
)

themes = [t.value for t in Theme]
theme = st.radio(
    "Theme",
    options=themes,
    index=themes.index(Theme.parse(config["default_theme"]).value),
    horizontal=True,
    format_func=lambda v: "Black on white" if v == Theme.LIGHT.value else "White on black",
)

if st.button("🚀 Generate QR codes"):
    try:
        with st.spinner("Generating..."):
            st.session_state["result"] = run_batch(uploaded_file, theme, config=config)
    except MissingInputError as e:
        st.session_state["result"] = None
        st.error(str(e))
    except ConversionError as e:
        st.session_state["result"] = None
        st.error(f"Conversion failed: {e}")

# ---------------- Result ----------------
result = st.session_state["result"]

if result is not None:
    if not result.tokens:
        st.info("No TG_ tokens found in the first sheet. The archive is empty.")
    else:
        st.success(f"Generated {result.entry_count} QR code(s) from {len(result.tokens)} token(s).")

    for token, reason in result.failures:
        st.warning(f"Skipped {token}: {reason}")

    if result.tokens:
        with st.expander("Tokens"):
            st.dataframe(pd.DataFrame({"token": result.tokens}), hide_index=True, use_container_width=True)
        with st.expander(f"Archive contents ({result.entry_count})"):
            st.dataframe(pd.DataFrame({"file": result.entries}), hide_index=True, use_container_width=True)

    st.download_button(
        label="⬇️ Download ZIP",
        data=base64.b64decode(result.archive),
        file_name="qr_codes.zip",
        mime="application/zip",
    )
