import argparse
import base64
import logging
import sys
from pathlib import Path

from services.config import get_qr_config, normalize_base_url, normalize_extension
from services.converter import run_batch
from services.errors import ConversionError


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Generate captioned QR codes for every TG_ token in a spreadsheet.")
    p.add_argument("--input", required=True, help="Spreadsheet path (.xlsx, .xls or .csv)")
    p.add_argument("--theme", choices=["light", "dark"], default=None)
    p.add_argument("--out", default="qr_codes.zip", help="Where to write the ZIP")
    p.add_argument("--base-url", default=None, help="Overrides the configured base URL")
    p.add_argument("--extension", default=None, help="File extension for generated codes")
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = get_qr_config()
    if args.base_url:
        config["base_url"] = normalize_base_url(args.base_url)
    if args.extension:
        config["extension"] = normalize_extension(args.extension)

    path = Path(args.input)
    if not path.exists():
        print(f"[error] {path} not found", file=sys.stderr)
        return 1

    try:
        result = run_batch(
            path.read_bytes(),
            args.theme or config["default_theme"],
            filename=path.name,
            config=config,
        )
    except ConversionError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(base64.b64decode(result.archive))

    for name in result.entries:
        print(f"✔ {name}")
    for token, reason in result.failures:
        print(f"✘ {token}: {reason}")
    print(f"[done] {result.entry_count} QR code(s) from {len(result.tokens)} token(s) → {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
