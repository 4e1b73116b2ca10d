"""End-to-end tests for the spreadsheet-to-archive pipeline."""

import asyncio
import io
import xml.etree.ElementTree as ET

import pandas as pd
import pytest

from services import converter
from services.converter import BatchResult, parse_excel, run_batch, synthesize_all
from services.errors import DecodeError, MissingInputError, SynthesisError
from services.qr_service import SVG_NS, Theme

CONFIG = {"base_url": "https://airlodme.com/", "extension": "svg", "default_theme": "light"}
LONG_TOKEN = "TG_" + "x" * 3000


def _xlsx(rows) -> bytes:
    buf = io.BytesIO()
    pd.DataFrame(rows).to_excel(buf, header=False, index=False, engine="openpyxl")
    return buf.getvalue()


class TestParseExcel:
    """The entry operation's result shape."""

    def test_scenario(self, unzip):
        result = parse_excel(_xlsx([["TG_001", "foo"], ["bar", "TG_002"]]), "light", config=CONFIG)

        assert set(result) == {"archive"}
        entries = unzip(result["archive"])
        assert list(entries) == ["qr_TG_001.svg", "qr_TG_002.svg"]
        for token, svg in zip(["TG_001", "TG_002"], entries.values()):
            assert ET.fromstring(svg).find(f"{{{SVG_NS}}}text").text == token
            assert "#000000" in svg and "#ffffff" in svg

    def test_missing_file(self):
        assert parse_excel(None, config=CONFIG) == {"error": "No file uploaded"}
        assert parse_excel(b"", config=CONFIG) == {"error": "No file uploaded"}

    def test_unreadable_file_is_an_error(self):
        result = parse_excel(b"garbage bytes", config=CONFIG)
        assert "archive" not in result
        assert result["error"]

    def test_no_tokens_gives_empty_archive(self, unzip):
        result = parse_excel(_xlsx([["a", "b"], [1, 2]]), config=CONFIG)
        assert unzip(result["archive"]) == {}


class TestRunBatch:
    def test_csv_upload_with_name(self):
        upload = io.BytesIO(b"TG_001,foo\nbar,TG_002\n")
        upload.name = "tokens.csv"

        result = run_batch(upload, "dark", config=CONFIG)

        assert isinstance(result, BatchResult)
        assert result.tokens == ["TG_001", "TG_002"]
        assert result.entry_count == 2
        assert result.failures == []
        assert result.entries == ["qr_TG_001.svg", "qr_TG_002.svg"]

    def test_ragged_csv(self):
        upload = io.BytesIO(b"TG_1\nx,TG_2,TG_3\n")
        upload.name = "ragged.csv"

        result = run_batch(upload, config=CONFIG)
        assert result.tokens == ["TG_1", "TG_2", "TG_3"]
        assert result.entry_count == 3

    def test_one_failure_drops_one_entry(self, unzip):
        data = _xlsx([["TG_001", LONG_TOKEN, "TG_002"]])
        result = run_batch(data, "light", config=CONFIG)

        assert result.entry_count == 2
        assert [token for token, _ in result.failures] == [LONG_TOKEN]
        assert set(unzip(result.archive)) == {"qr_TG_001.svg", "qr_TG_002.svg"}

    def test_duplicate_tokens_share_one_entry(self):
        result = run_batch(_xlsx([["TG_A", "TG_A"], ["TG_A", None]]), config=CONFIG)
        assert result.tokens == ["TG_A", "TG_A", "TG_A"]
        assert result.entry_count == 1
        assert result.entries == ["qr_TG_A.svg"]

    def test_configured_extension(self, unzip):
        cfg = dict(CONFIG, extension="eps")
        result = run_batch(_xlsx([["TG_001"]]), config=cfg)
        assert list(unzip(result.archive)) == ["qr_TG_001.eps"]

    def test_missing_input_raises(self):
        with pytest.raises(MissingInputError):
            run_batch(None, config=CONFIG)

    def test_decode_error_raises(self):
        with pytest.raises(DecodeError):
            run_batch(b"garbage", filename="x.xlsx", config=CONFIG)


class TestSynthesizeAll:
    def test_outcomes_follow_token_order(self):
        tokens = ["TG_1", LONG_TOKEN, "TG_2"]
        outcomes = asyncio.run(synthesize_all(tokens, Theme.LIGHT, CONFIG["base_url"]))

        assert len(outcomes) == 3
        assert isinstance(outcomes[1], SynthesisError)
        assert ET.fromstring(outcomes[0]).find(f"{{{SVG_NS}}}text").text == "TG_1"
        assert ET.fromstring(outcomes[2]).find(f"{{{SVG_NS}}}text").text == "TG_2"

    def test_unexpected_errors_propagate(self, monkeypatch):
        def boom(token, theme, base_url):
            raise RuntimeError("encoder crashed")

        monkeypatch.setattr(converter, "synthesize", boom)
        with pytest.raises(RuntimeError):
            asyncio.run(synthesize_all(["TG_1"], Theme.LIGHT, CONFIG["base_url"]))

    def test_empty(self):
        assert asyncio.run(synthesize_all([], Theme.LIGHT, CONFIG["base_url"])) == []
