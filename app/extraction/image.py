import base64

from app.extraction.exceptions import UnsupportedDocumentError
from app.pdf.base import BasePdfRasterizer

PDF_MIME = "application/pdf"
_IMAGE_MIME_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")


def prepare_image_url(raw_bytes: bytes, mime: str, rasterizer: BasePdfRasterizer) -> str:
    """Turn document bytes into a base64 data URL the vision model accepts.

    PDFs are rendered to a PNG of their first page.

    Raises:
        UnsupportedDocumentError: for MIME types that are neither PDF nor image.
        PdfRenderError: if a PDF cannot be rendered.
    """
    normalized = mime.lower().split(";")[0].strip()
    if normalized == PDF_MIME:
        image_bytes = rasterizer.render(raw_bytes)
        image_type = "image/png"
    elif normalized == "image/jpg":
        image_bytes = raw_bytes
        image_type = "image/jpeg"
    elif normalized in _IMAGE_MIME_TYPES:
        image_bytes = raw_bytes
        image_type = normalized
    else:
        raise UnsupportedDocumentError(f"Unsupported document type: {mime}")

    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{image_type};base64,{encoded}"
