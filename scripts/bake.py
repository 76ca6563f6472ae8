#!/usr/bin/env python3
"""Bake placed fields into a PDF and record the integrity fingerprints.

Fields are applied in the order given; each injection reads the revision
produced by the previous one, so later fields are drawn over earlier ones.
Fields missing their content are skipped. Any other failure aborts the
whole run and nothing is written.

Usage:
    python bake.py <input.pdf> <fields.json> <output.pdf> [--record record.json]

See fields.py for the fields.json format.
"""

import argparse
import io
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import EmptyFileError, PdfReadError

from errors import BakeError, EmptyDocument
from fields import load_fields
from geometry import ViewportSize, check_viewport
from inject import DEFAULT_CONFIG, InjectionConfig, inject
from ledger import FieldSummary, build_record

logger = logging.getLogger(__name__)


@dataclass
class BakeResult:
    data: bytes
    applied: list = field(default_factory=list)
    skipped: list = field(default_factory=list)


def count_pages(data: bytes) -> int:
    try:
        return len(PdfReader(io.BytesIO(data)).pages)
    except EmptyFileError:
        return 0


def process_all(original: bytes, fields, viewport: ViewportSize, config=DEFAULT_CONFIG) -> BakeResult:
    """Apply every complete field to ``original``, in order."""
    revision = bytes(original)
    if count_pages(revision) == 0:
        raise EmptyDocument("Source document has no pages")
    check_viewport(viewport)

    result = BakeResult(data=revision)
    for index, f in enumerate(fields):
        if not f.is_complete():
            logger.info("Skipping field %d (%s): no content", index, f.kind.value)
            result.skipped.append(FieldSummary(f.kind, config.clock(), index=index))
            continue
        revision = inject(revision, f, viewport, config)
        result.applied.append(FieldSummary(f.kind, config.clock(), index=index))

    result.data = revision
    logger.debug("Applied %d fields, skipped %d", len(result.applied), len(result.skipped))
    return result


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def bake_pdf(input_path, fields_path, output_path, config=DEFAULT_CONFIG, record_path=None):
    """Bake the fields file into the input PDF and write the output PDF."""
    created_at = config.clock()
    with open(fields_path) as f:
        spec = json.load(f)
    viewport, fields = load_fields(spec, base_dir=Path(fields_path).parent)

    original = Path(input_path).read_bytes()
    result = process_all(original, fields, viewport, config)
    record = build_record(original, result.data, result.applied,
                          created_at=created_at, signed_at=config.clock())

    Path(output_path).write_bytes(result.data)
    if record_path:
        Path(record_path).write_text(json.dumps(record.to_dict(), indent=2))

    return {
        "status": "success",
        "output": str(output_path),
        "original_hash": record.original_fingerprint,
        "signed_hash": record.signed_fingerprint,
        "fields_applied": len(result.applied),
        "fields_skipped": len(result.skipped),
        "skipped": [s.to_dict() for s in result.skipped],
        "record": record.to_dict(),
    }


def main():
    parser = argparse.ArgumentParser(description="Bake fields into a PDF")
    parser.add_argument("input_pdf", help="Path to input PDF")
    parser.add_argument("fields", help="Path to JSON fields file")
    parser.add_argument("output_pdf", help="Path for output PDF")
    parser.add_argument("--record", help="Also write the integrity record to this JSON file")
    parser.add_argument("--font", default=DEFAULT_CONFIG.font_name, help="Font for text and date fields")
    parser.add_argument("--font-size", type=float, default=DEFAULT_CONFIG.font_size,
                        help="Default font size (default: 12)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")

    if not Path(args.input_pdf).exists():
        print(json.dumps({"error": f"Input PDF not found: {args.input_pdf}"}), file=sys.stderr)
        sys.exit(1)
    if not Path(args.fields).exists():
        print(json.dumps({"error": f"Fields file not found: {args.fields}"}), file=sys.stderr)
        sys.exit(1)

    config = InjectionConfig(font_name=args.font, font_size=args.font_size)
    try:
        report = bake_pdf(args.input_pdf, args.fields, args.output_pdf, config, args.record)
    except (BakeError, PdfReadError, ValueError) as e:
        print(json.dumps({"error": str(e), "type": type(e).__name__}), file=sys.stderr)
        sys.exit(1)

    indent = 2 if args.pretty else None
    print(json.dumps(report, indent=indent, ensure_ascii=False))


if __name__ == "__main__":
    main()
