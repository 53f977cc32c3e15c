import base64
import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

# 1x1 transparent PNG
_PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def bill_pdf_bytes() -> bytes:
    """A multi-page uncompressed utility bill PDF of roughly 500 KB."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter, pageCompression=0)
    c.drawString(72, 740, "Example Energy - Gas bill")
    c.drawString(72, 725, "Billing period 2025-01-01 to 2025-01-31")
    c.drawString(72, 710, "Total due $120.00 by 2025-02-15")
    for page in range(80):
        for line in range(50):
            c.drawString(36, 690 - line * 13, f"Usage detail {page:02d}-{line:02d} " + "." * 80)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    return _PNG_1X1
