"""Pytest configuration and shared fixtures for sealmark tests."""

import io
import json
import subprocess
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from PIL import Image
from pypdf import PdfWriter

# Add scripts to path
SEALMARK_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(SEALMARK_ROOT / "scripts"))

SCRIPTS = SEALMARK_ROOT / "scripts"

from sample_pdf import build_sample_pdf  # noqa: E402

VIEWPORT = {"width": 800, "height": 1100}


def image_bytes(width, height, fmt="PNG", color=(0, 0, 0, 255)):
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, (width, height), color if mode == "RGBA" else color[:3])
    buf = io.BytesIO()
    img.save(buf, fmt)
    return buf.getvalue()


class FixedClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start=datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def sample_pdf():
    return build_sample_pdf()


@pytest.fixture
def three_page_pdf():
    return build_sample_pdf(pages=3)


@pytest.fixture
def empty_pdf():
    buf = io.BytesIO()
    PdfWriter().write(buf)
    return buf.getvalue()


@pytest.fixture
def png_400x100():
    return image_bytes(400, 100, "PNG")


@pytest.fixture
def jpeg_100x100():
    return image_bytes(100, 100, "JPEG")


@pytest.fixture
def gif_bytes():
    return image_bytes(50, 50, "GIF")


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def tmp_output(tmp_path):
    return tmp_path


# --- Helpers used across test files ---

def run_bake(input_pdf, fields_path, output_pdf, extra_args=None):
    """Run bake.py and return (parsed JSON output or stderr JSON, exitcode)."""
    cmd = [sys.executable, str(SCRIPTS / "bake.py"), str(input_pdf), str(fields_path), str(output_pdf)]
    if extra_args:
        cmd.extend(extra_args)
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    if result.returncode != 0:
        return json.loads(result.stderr.strip().splitlines()[-1]), result.returncode
    return json.loads(result.stdout), result.returncode


def run_ledger(*args):
    """Run ledger.py and return (report, exitcode)."""
    cmd = [sys.executable, str(SCRIPTS / "ledger.py"), *map(str, args)]
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    out = result.stdout if result.stdout.strip() else result.stderr
    return json.loads(out.strip().splitlines()[-1]), result.returncode


def make_fields_file(tmp_path, fields, viewport=None):
    """Write a fields JSON file and return its path."""
    path = tmp_path / "fields.json"
    path.write_text(json.dumps({"viewport": viewport or VIEWPORT, "fields": fields}))
    return path
