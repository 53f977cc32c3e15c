import io

import pdfplumber

from app.pdf.base import BasePdfRasterizer
from app.pdf.exceptions import PdfRenderError


class PdfPlumberAdapter(BasePdfRasterizer):
    """Renders PDF pages using pdfplumber."""

    def render(self, pdf_bytes: bytes) -> bytes:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                if not pdf.pages:
                    raise PdfRenderError("PDF has no pages")
                page_image = pdf.pages[0].to_image(resolution=self._dpi)
                buf = io.BytesIO()
                page_image.original.save(buf, format="PNG")
            return buf.getvalue()
        except PdfRenderError:
            raise
        except Exception as exc:
            raise PdfRenderError(f"pdfplumber rendering failed: {exc}") from exc
