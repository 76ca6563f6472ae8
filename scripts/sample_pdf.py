#!/usr/bin/env python3
"""Generate a sample employment contract to place fields on.

Usage:
    python sample_pdf.py <output.pdf> [--pages 1]
"""

import argparse
import io
import json

from reportlab.pdfgen import canvas

from geometry import A4_HEIGHT_POINTS, A4_WIDTH_POINTS

HEADING_COLOR = (0.2, 0.2, 0.8)

# (text, offset from top of page, bold)
CONTRACT_LINES = [
    ('This Employment Contract ("Agreement") is entered into on this date between:', 100, False),
    ("EMPLOYER: BoloForms Inc.", 130, True),
    ("Address: 123 Tech Street, San Francisco, CA 94105", 150, False),
    ("EMPLOYEE: [Employee Name]", 180, True),
    ("Address: [Employee Address]", 200, False),
    ("1. POSITION AND DUTIES", 240, True),
    ("The Employee is hired for the position of Software Engineer. The Employee agrees", 260, False),
    ("to perform all duties and responsibilities associated with this position.", 275, False),
    ("2. COMPENSATION", 310, True),
    ("The Employee will receive an annual salary of $120,000, payable in accordance", 330, False),
    ("with the Company's standard payroll practices.", 345, False),
    ("3. START DATE", 380, True),
    ("Employment will commence on: _______________", 400, False),
    ("4. BENEFITS", 435, True),
    ("The Employee is entitled to health insurance, dental coverage, and 401(k) matching.", 455, False),
    ("[ ] I accept the health insurance package", 480, False),
    ("[ ] I decline the health insurance package", 500, False),
    ("5. CONFIDENTIALITY", 535, True),
    ("The Employee agrees to maintain confidentiality of all proprietary information", 555, False),
    ("and trade secrets of the Company during and after employment.", 570, False),
    ("6. TERMINATION", 605, True),
    ("Either party may terminate this Agreement with 30 days written notice.", 625, False),
    ("SIGNATURES", 670, True),
    ("Employee Signature: _______________________  Date: _______________", 700, False),
    ("Employer Signature: _______________________  Date: _______________", 730, False),
]


def _draw_contract_page(c, width, height, page_number, page_count):
    c.setFillColorRGB(*HEADING_COLOR)
    c.setFont("Helvetica-Bold", 24)
    c.drawString(50, height - 50, "EMPLOYMENT CONTRACT")
    c.setStrokeColorRGB(*HEADING_COLOR)
    c.setLineWidth(2)
    c.line(50, height - 60, width - 50, height - 60)

    c.setFillColorRGB(0, 0, 0)
    for text, offset, bold in CONTRACT_LINES:
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 11 if bold else 10)
        c.drawString(50, height - offset, text)

    c.setFont("Helvetica", 8)
    c.drawString(50, 30, f"Page {page_number} of {page_count}")


def build_sample_pdf(pages=1, width=A4_WIDTH_POINTS, height=A4_HEIGHT_POINTS) -> bytes:
    """Return a sample contract PDF (A4 by default) with ``pages`` pages."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(width, height), invariant=1)
    c.setTitle("Employment Contract")
    for n in range(pages):
        _draw_contract_page(c, width, height, n + 1, pages)
        c.showPage()
    c.save()
    return buf.getvalue()


def main():
    parser = argparse.ArgumentParser(description="Write a sample contract PDF")
    parser.add_argument("output", help="Output PDF path")
    parser.add_argument("--pages", type=int, default=1, help="Number of pages (default: 1)")
    args = parser.parse_args()

    data = build_sample_pdf(args.pages)
    with open(args.output, "wb") as f:
        f.write(data)
    print(json.dumps({"status": "saved", "path": args.output, "pages": args.pages}))


if __name__ == "__main__":
    main()
