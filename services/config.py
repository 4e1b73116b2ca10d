# token_qr/services/config.py

import logging
import os

import streamlit as st

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://airlodme.com/"
DEFAULT_EXTENSION = "svg"
DEFAULT_THEME = "light"


# ---------------- Helpers ----------------
def _secrets_section() -> dict:
    try:
        return dict(st.secrets["qr"])
    except Exception as e:
        # No secrets.toml or no [qr] table: fall back to env/defaults
        logger.debug("QR secrets unavailable: %s", e)
        return {}


def normalize_extension(ext: str) -> str:
    return str(ext).strip().lstrip(".").lower() or DEFAULT_EXTENSION


def normalize_base_url(url: str) -> str:
    url = str(url).strip() or DEFAULT_BASE_URL
    return url if url.endswith("/") else url + "/"


# ---------------- QR config ----------------
def get_qr_config() -> dict:
    """
    Settings for a conversion run, read from the [qr] table of the
    Streamlit secrets. QR_* environment variables take precedence.
    """
    qr_config = _secrets_section()
    return {
        "base_url": normalize_base_url(
            os.environ.get("QR_BASE_URL") or qr_config.get("base_url", DEFAULT_BASE_URL)
        ),
        "extension": normalize_extension(
            os.environ.get("QR_EXTENSION") or qr_config.get("extension", DEFAULT_EXTENSION)
        ),
        "default_theme": str(
            os.environ.get("QR_DEFAULT_THEME") or qr_config.get("default_theme", DEFAULT_THEME)
        ).strip().lower(),
    }
