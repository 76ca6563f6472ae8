#!/usr/bin/env python3
"""Content fingerprints and integrity records for baked documents.

The fingerprint is the SHA-256 of a document's exact bytes. Verification
recomputes it from what is actually in storage and reports one of three
states: verified, tampered, or unreadable.

Usage:
    python ledger.py fingerprint <file>
    python ledger.py verify <file> <digest>
    python ledger.py audit <record.json> --original <original.pdf> --signed <signed.pdf>

Exits non-zero unless everything checked is verified.
"""

import argparse
import hashlib
import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from errors import IntegrityMismatch
from fields import FieldKind

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class Integrity(str, Enum):
    VERIFIED = "verified"
    TAMPERED = "tampered"
    UNREADABLE = "unreadable"


# ---------------------------------------------------------------------------
# Fingerprints
# ---------------------------------------------------------------------------

def fingerprint(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def fingerprint_file(path, chunk_size=CHUNK_SIZE) -> str:
    """Fingerprint a stored file without loading it whole."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _recompute(source):
    """Fingerprint of ``source`` (bytes or a path), or None if it cannot be read."""
    if source is None:
        return None
    if isinstance(source, (bytes, bytearray, memoryview)):
        return fingerprint(bytes(source))
    try:
        return fingerprint_file(source)
    except OSError as e:
        logger.warning("Cannot read %s: %s", source, e)
        return None


def verify(stored_digest: str, source) -> Integrity:
    """Compare ``stored_digest`` with the fingerprint of ``source``."""
    actual = _recompute(source)
    if actual is None:
        return Integrity.UNREADABLE
    if actual != str(stored_digest).strip().lower():
        logger.warning("Fingerprint mismatch: expected %s, got %s", stored_digest, actual)
        return Integrity.TAMPERED
    return Integrity.VERIFIED


def ensure_verified(stored_digest: str, source) -> None:
    """Like verify(), but raise IntegrityMismatch unless the source is intact."""
    actual = _recompute(source)
    if actual is None:
        raise IntegrityMismatch(Integrity.UNREADABLE.value, stored_digest)
    if actual != str(stored_digest).strip().lower():
        raise IntegrityMismatch(Integrity.TAMPERED.value, stored_digest, actual)


# ---------------------------------------------------------------------------
# Integrity record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldSummary:
    """That a field of some kind was applied (or skipped), and when. Never its content."""

    kind: FieldKind
    applied_at: datetime
    index: Optional[int] = field(default=None, compare=False)

    def to_dict(self):
        d = {"kind": self.kind.value, "applied_at": self.applied_at.isoformat()}
        if self.index is not None:
            d["index"] = self.index
        return d

    @classmethod
    def from_dict(cls, data):
        return cls(
            kind=FieldKind(data["kind"]),
            applied_at=datetime.fromisoformat(data["applied_at"]),
            index=data.get("index"),
        )


@dataclass(frozen=True)
class IntegrityRecord:
    original_fingerprint: str
    signed_fingerprint: str
    created_at: datetime
    signed_at: datetime
    field_summaries: tuple = ()

    def to_dict(self):
        return {
            "original_fingerprint": self.original_fingerprint,
            "signed_fingerprint": self.signed_fingerprint,
            "created_at": self.created_at.isoformat(),
            "signed_at": self.signed_at.isoformat(),
            "fields": [s.to_dict() for s in self.field_summaries],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            original_fingerprint=data["original_fingerprint"],
            signed_fingerprint=data["signed_fingerprint"],
            created_at=datetime.fromisoformat(data["created_at"]),
            signed_at=datetime.fromisoformat(data["signed_at"]),
            field_summaries=tuple(FieldSummary.from_dict(s) for s in data.get("fields", [])),
        )


def build_record(original: bytes, signed: bytes, applied, created_at, signed_at) -> IntegrityRecord:
    return IntegrityRecord(
        original_fingerprint=fingerprint(original),
        signed_fingerprint=fingerprint(signed),
        created_at=created_at,
        signed_at=signed_at,
        field_summaries=tuple(applied),
    )


@dataclass(frozen=True)
class AuditReport:
    original: Integrity
    signed: Integrity

    @property
    def intact(self):
        return self.original is Integrity.VERIFIED and self.signed is Integrity.VERIFIED

    def to_dict(self):
        return {
            "original": self.original.value,
            "signed": self.signed.value,
            "intact": self.intact,
        }


def audit(record: IntegrityRecord, original_source, signed_source) -> AuditReport:
    """Check both stored artifacts against their recorded fingerprints."""
    return AuditReport(
        original=verify(record.original_fingerprint, original_source),
        signed=verify(record.signed_fingerprint, signed_source),
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _emit(report, pretty):
    print(json.dumps(report, indent=2 if pretty else None, ensure_ascii=False))


def main():
    parser = argparse.ArgumentParser(description="Fingerprint and verify baked documents")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    p_fp = sub.add_parser("fingerprint", help="Print the SHA-256 fingerprint of a file")
    p_fp.add_argument("file")

    p_verify = sub.add_parser("verify", help="Check a file against a stored fingerprint")
    p_verify.add_argument("file")
    p_verify.add_argument("digest")

    p_audit = sub.add_parser("audit", help="Check both artifacts of an integrity record")
    p_audit.add_argument("record", help="Path to integrity record JSON")
    p_audit.add_argument("--original", required=True, help="Stored original PDF")
    p_audit.add_argument("--signed", required=True, help="Stored signed PDF")

    args = parser.parse_args()

    if args.command == "fingerprint":
        if not Path(args.file).exists():
            print(json.dumps({"error": f"File not found: {args.file}"}), file=sys.stderr)
            sys.exit(1)
        _emit({"file": args.file, "fingerprint": fingerprint_file(args.file)}, args.pretty)
        return

    if args.command == "verify":
        status = verify(args.digest, args.file)
        _emit({"file": args.file, "status": status.value}, args.pretty)
        sys.exit(0 if status is Integrity.VERIFIED else 1)

    try:
        with open(args.record) as f:
            record = IntegrityRecord.from_dict(json.load(f))
    except (OSError, ValueError, KeyError) as e:
        print(json.dumps({"error": f"Cannot load record {args.record}: {e}"}), file=sys.stderr)
        sys.exit(1)

    report = audit(record, args.original, args.signed)
    _emit({
        "record": args.record,
        "audit": report.to_dict(),
        "record_detail": record.to_dict(),
    }, args.pretty)
    sys.exit(0 if report.intact else 1)


if __name__ == "__main__":
    main()
