#!/usr/bin/env python3
"""Scan one fitness screenshot from the command line and print the extracted record as JSON."""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from constants import DEFAULT_MODEL_NAME, LOG_LEVEL  # noqa: E402
from errors import ConfigurationError, FitSnapError  # noqa: E402
from extractor import ExtractionClient  # noqa: E402
from image_io import load_image  # noqa: E402
from scanner import ScanService  # noqa: E402
from session_store import SessionStore  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract activity data from fitness app screenshots.")
    parser.add_argument("paths", nargs="+", type=Path, help="Screenshot files (PNG, JPG or WEBP)")
    parser.add_argument("--model", default=DEFAULT_MODEL_NAME, help="Gemini model name")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    try:
        scanner = ScanService(SessionStore(), ExtractionClient(model_name=args.model))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    failures = 0
    for path in args.paths:
        try:
            image = load_image(path)
        except FitSnapError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            failures += 1
            continue

        entry = scanner.submit(image)
        if entry is None:
            print(f"{path}: {scanner.store.last_error}", file=sys.stderr)
            failures += 1
            continue
        print(json.dumps({"file": str(path), **entry.result.to_dict()}, indent=2))

    print(f"Scanned {scanner.store.count()} of {len(args.paths)} screenshot(s).", file=sys.stderr)
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
