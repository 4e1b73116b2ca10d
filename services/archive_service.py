# token_qr/services/archive_service.py

import base64
import io
import zipfile

from services.errors import PackagingError


class Archive:
    """
    Flat collection of named text entries, serialized once into a
    base64-encoded ZIP. Entries are keyed by filename, so registering the
    same name twice keeps the last content.
    """

    def __init__(self):
        self._entries: dict[str, str] = {}
        self._blob: str | None = None

    def add(self, filename: str, content: str) -> None:
        if self._blob is not None:
            raise PackagingError("Archive already serialized")
        self._entries.pop(filename, None)
        self._entries[filename] = content

    def names(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def serialize(self) -> str:
        if self._blob is not None:
            return self._blob

        zip_buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as zipf:
                for name, content in self._entries.items():
                    zipf.writestr(name, content)
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise PackagingError(f"Couldn't build archive: {e}") from e

        self._blob = base64.b64encode(zip_buffer.getvalue()).decode("ascii")
        return self._blob

