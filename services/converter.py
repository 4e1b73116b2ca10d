# token_qr/services/converter.py

import asyncio
import logging
from dataclasses import dataclass, field

from data.grid import extract_tokens, read_grid
from services.archive_service import Archive
from services.config import get_qr_config
from services.errors import ConversionError, MissingInputError, SynthesisError
from services.qr_service import Theme, artifact_filename, synthesize

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    tokens: list[str]
    archive: str
    entry_count: int
    entries: list[str] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)


# ---------------- Fan-out ----------------
async def synthesize_all(tokens: list[str], theme: Theme, base_url: str) -> list:
    """
    Synthesize every token concurrently. Returns one outcome per token, in
    token order: the SVG text, or the SynthesisError that token raised.
    """
    tasks = [asyncio.to_thread(synthesize, token, theme, base_url) for token in tokens]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(outcome, SynthesisError):
            raise outcome
    return outcomes


def package(tokens: list[str], outcomes: list, extension: str) -> tuple[Archive, list[tuple[str, str]]]:
    archive = Archive()
    failures = []
    for token, outcome in zip(tokens, outcomes):
        if isinstance(outcome, SynthesisError):
            logger.warning("Skipping %s: %s", token, outcome.reason)
            failures.append((token, outcome.reason))
            continue
        archive.add(artifact_filename(token, extension), outcome)
    return archive, failures


# ---------------- Batch ----------------
def _read_upload(file) -> tuple[bytes | None, str | None]:
    if file is None:
        return None, None
    if isinstance(file, (bytes, bytearray)):
        return bytes(file), None
    # Streamlit's UploadedFile is a BytesIO; getvalue() survives reruns
    data = file.getvalue() if hasattr(file, "getvalue") else file.read()
    return data, getattr(file, "name", None)


def run_batch(file, theme="light", filename: str | None = None, config: dict | None = None) -> BatchResult:
    """
    Spreadsheet in, base64 ZIP of captioned QR codes out.

    Raises MissingInputError, DecodeError or PackagingError. Tokens the
    encoder rejects are left out of the archive and listed in failures.
    """
    cfg = config or get_qr_config()
    data, upload_name = _read_upload(file)
    if not data:
        raise MissingInputError()

    theme = Theme.parse(theme)
    grid = read_grid(data, filename or upload_name)
    tokens = extract_tokens(grid)
    logger.info("Found %d token(s), rendering with %s theme", len(tokens), theme.value)

    outcomes = asyncio.run(synthesize_all(tokens, theme, cfg["base_url"]))
    archive, failures = package(tokens, outcomes, cfg["extension"])
    blob = archive.serialize()

    logger.info("Archive ready: %d entries, %d failure(s)", len(archive), len(failures))
    return BatchResult(
        tokens=tokens,
        archive=blob,
        entry_count=len(archive),
        entries=archive.names(),
        failures=failures,
    )


def parse_excel(file, theme="light", config: dict | None = None) -> dict:
    """
    Entry operation: {"archive": <base64 zip>} on success,
    {"error": <message>} otherwise.
    """
    try:
        result = run_batch(file, theme, config=config)
    except ConversionError as e:
        return {"error": str(e)}
    return {"archive": result.archive}
