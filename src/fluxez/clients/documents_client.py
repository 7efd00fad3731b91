"""Documents API Client

Server-side PDF and OCR processing. Inputs are referenced by URL (for example
a storage signed URL); results come back as document descriptors with a
download ``url``.

Handles:
- PDF generation, text extraction, merge, split and compression
- Watermarks and password protection
- OCR on images and PDFs
- Document templates, format conversion and processing logs
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

OCR_PROVIDERS = ("tesseract", "google-vision", "aws-textract", "azure-vision")
DEFAULT_OCR_PROVIDER = "tesseract"
PDF_SOURCES = ("html", "url", "markdown", "template")


class DocumentsClient(BaseAPIClient):
    """Client for the documents API."""

    ENDPOINT = "/documents"

    # PDF
    async def generate_pdf(self, **options: Any) -> dict[str, Any]:
        """Render a PDF.

        Exactly one source is expected among ``html``, ``url``, ``markdown``
        and ``template`` (with ``templateData``). Page settings go in
        ``options``.
        """
        if not any(options.get(source) for source in PDF_SOURCES):
            self._require(None, "html, url, markdown or template")
        logger.debug("Generating PDF")
        return await self._post(self._build_url("pdf", "generate"), options)

    async def extract_text(self, pdf_url: str) -> dict[str, Any]:
        """Text of every page, with ``pageCount`` and document metadata."""
        self._require(pdf_url, "pdf_url")
        return await self._post(
            self._build_url("pdf", "extract-text"), {"pdfUrl": pdf_url}, idempotent=True
        )

    async def merge_pdfs(self, pdf_urls: list[str], **options: Any) -> dict[str, Any]:
        self._require(pdf_urls, "pdf_urls")
        if len(pdf_urls) < 2:
            self._require(None, "second pdf_url")
        return await self._post(
            self._build_url("pdf", "merge"), {"pdfUrls": pdf_urls, **options}
        )

    async def add_watermark(
        self, pdf_url: str, watermark: str, **options: Any
    ) -> dict[str, Any]:
        """Stamp ``watermark`` text; ``opacity``, ``position``, ``fontSize``... pass through."""
        self._require(pdf_url, "pdf_url")
        self._require(watermark, "watermark")
        return await self._post(
            self._build_url("pdf", "watermark"),
            {"pdfUrl": pdf_url, "watermark": watermark, **options},
        )

    async def split_pdf(
        self, pdf_url: str, ranges: list[dict[str, int]], **options: Any
    ) -> list[dict[str, Any]]:
        """Split into one document per ``{"start", "end"}`` page range."""
        self._require(pdf_url, "pdf_url")
        self._require(ranges, "ranges")
        result = await self._post(
            self._build_url("pdf", "split"),
            {"pdfUrl": pdf_url, "ranges": ranges, **options},
        )
        if isinstance(result, dict):
            return result.get("documents") or []
        return result or []

    async def compress_pdf(self, pdf_url: str, quality: int = 75) -> dict[str, Any]:
        self._require(pdf_url, "pdf_url")
        return await self._post(
            self._build_url("pdf", "compress"), {"pdfUrl": pdf_url, "quality": quality}
        )

    async def protect_pdf(
        self,
        pdf_url: str,
        password: str,
        permissions: dict[str, bool] | None = None,
    ) -> dict[str, Any]:
        self._require(pdf_url, "pdf_url")
        self._require(password, "password")
        return await self._post(
            self._build_url("pdf", "protect"),
            self._compact(
                {"pdfUrl": pdf_url, "password": password, "permissions": permissions}
            ),
        )

    # OCR
    async def perform_ocr(
        self, image_url: str, provider: str = DEFAULT_OCR_PROVIDER
    ) -> dict[str, Any]:
        """Recognize text in an image.

        Returns:
            ``{"text", "confidence", "language", "blocks"}``
        """
        self._require(image_url, "image_url")
        self._require_choice(provider, OCR_PROVIDERS, "provider")
        return await self._post(
            self._build_url("ocr", "image"),
            {"imageUrl": image_url, "provider": provider},
            idempotent=True,
        )

    async def ocr_pdf(
        self, pdf_url: str, provider: str = DEFAULT_OCR_PROVIDER
    ) -> list[dict[str, Any]]:
        """OCR every page of a scanned PDF; one result per page."""
        self._require(pdf_url, "pdf_url")
        self._require_choice(provider, OCR_PROVIDERS, "provider")
        result = await self._post(
            self._build_url("ocr", "pdf"),
            {"pdfUrl": pdf_url, "provider": provider},
            idempotent=True,
        )
        if isinstance(result, dict):
            return result.get("results") or []
        return result or []

    # Templates
    async def list_templates(self, **filters: Any) -> list[dict[str, Any]]:
        result = await self._get(self._build_url("templates"), filters)
        if isinstance(result, dict):
            return result.get("templates") or []
        return result or []

    async def get_template(self, template_id: str) -> dict[str, Any]:
        self._require(template_id, "template_id")
        return await self._get(self._build_url("templates", template_id))

    async def create_template(self, template: dict[str, Any]) -> dict[str, Any]:
        self._require(template, "template")
        return await self._post(self._build_url("templates"), template)

    async def update_template(
        self, template_id: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(template_id, "template_id")
        self._require(updates, "updates")
        return await self._put(self._build_url("templates", template_id), updates)

    async def delete_template(self, template_id: str) -> None:
        self._require(template_id, "template_id")
        await self._delete(self._build_url("templates", template_id))

    async def convert_document(
        self,
        source_url: str,
        source_format: str,
        target_format: str,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self._require(source_url, "source_url")
        self._require(source_format, "source_format")
        self._require(target_format, "target_format")
        return await self._post(
            self._build_url("convert"),
            self._compact(
                {
                    "sourceUrl": source_url,
                    "sourceFormat": source_format,
                    "targetFormat": target_format,
                    "options": options,
                }
            ),
        )

    # Processing logs
    async def get_processing_logs(self, **filters: Any) -> list[dict[str, Any]]:
        result = await self._get(self._build_url("logs"), filters)
        if isinstance(result, dict):
            return result.get("logs") or []
        return result or []

    async def get_processing_log(self, log_id: str) -> dict[str, Any]:
        self._require(log_id, "log_id")
        return await self._get(self._build_url("logs", log_id))
