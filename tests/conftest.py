import base64
import io
import zipfile

import pytest


@pytest.fixture
def unzip():
    """Decode a base64 archive blob into {filename: content}."""

    def _unzip(blob: str) -> dict[str, str]:
        with zipfile.ZipFile(io.BytesIO(base64.b64decode(blob))) as zipf:
            return {name: zipf.read(name).decode("utf-8") for name in zipf.namelist()}

    return _unzip
