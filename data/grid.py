# token_qr/data/grid.py

import csv
import io
import math
import numbers
from enum import Enum
from pathlib import Path

import pandas as pd
from pandas.errors import EmptyDataError

from services.errors import DecodeError

TOKEN_PREFIX = "TG_"


# ---------------- Cell kinds ----------------
class CellKind(Enum):
    TEXT = "text"
    NUMBER = "number"
    BLANK = "blank"
    OTHER = "other"


def classify_cell(value) -> CellKind:
    if value is None or value is pd.NA or value is pd.NaT:
        return CellKind.BLANK
    if isinstance(value, str):
        return CellKind.TEXT
    # bool is an Integral, keep it out of NUMBER
    if isinstance(value, bool):
        return CellKind.OTHER
    if isinstance(value, numbers.Number):
        if isinstance(value, numbers.Real) and math.isnan(value):
            return CellKind.BLANK
        return CellKind.NUMBER
    return CellKind.OTHER


def _number_text(value) -> str:
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real) and math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


def cell_text(value) -> str:
    """
    String form of a single cell: blanks become "", integral floats drop
    their fractional part (1.0 -> "1").
    """
    kind = classify_cell(value)
    if kind is CellKind.BLANK:
        return ""
    if kind is CellKind.TEXT:
        return value
    if kind is CellKind.NUMBER:
        return _number_text(value)
    return str(value)


# ---------------- Token extraction ----------------
def extract_tokens(grid) -> list[str]:
    """
    Flatten the grid row by row and keep every trimmed cell that starts
    with TG_. Duplicates are kept.
    """
    tokens = []
    for row in grid or []:
        for value in row:
            text = cell_text(value).strip()
            if text.startswith(TOKEN_PREFIX):
                tokens.append(text)
    return tokens


# ---------------- Tabular decoding ----------------
def _frame_to_grid(df: pd.DataFrame) -> list[list]:
    df = df.astype(object)
    return df.where(pd.notna(df), None).values.tolist()


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _read_csv(data: bytes) -> pd.DataFrame:
    text = _decode_text(data)
    # Rows may be ragged: size the frame to the widest one
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        return pd.DataFrame()
    return pd.read_csv(io.StringIO(text), header=None, names=list(range(width)))


def read_grid(data: bytes, filename: str | None = None) -> list[list]:
    """
    Decode the first sheet of a spreadsheet (or a CSV file) into a
    header-less list of rows. Missing cells come back as None.
    """
    suffix = Path(filename).suffix.lower() if filename else ""
    try:
        if suffix == ".csv":
            df = _read_csv(data)
        else:
            df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None)
    except EmptyDataError:
        return []
    except Exception as e:
        name = filename or "upload"
        raise DecodeError(f"Couldn't read {name}: {e}") from e

    return _frame_to_grid(df)
