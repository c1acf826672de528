import io
import logging
import fitz  # PyMuPDF
import pdfplumber
from docx import Document
from services.validation import InputValidationError, sanitize_text

logger = logging.getLogger("document_parser")

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_MIME_TYPES = (PDF_MIME_TYPE, DOCX_MIME_TYPE)


class DocumentParser:
    """Extract plain text from uploaded PDF and DOCX files."""

    @staticmethod
    def check_upload(file_name: str | None, content_type: str | None, size: int, max_size_mb: int = 10) -> None:
        """Reject uploads that are too large, of the wrong type, or have a suspicious name."""
        if size > max_size_mb * 1024 * 1024:
            raise InputValidationError(f"File size exceeds {max_size_mb}MB limit")

        if content_type not in ALLOWED_MIME_TYPES:
            raise InputValidationError("Invalid file type. Only PDF and DOCX files are allowed.")

        if not file_name or ".." in file_name or "/" in file_name or "\\" in file_name:
            raise InputValidationError("Invalid file name")

    @staticmethod
    def parse(data: bytes, content_type: str) -> str:
        """Extract and sanitize the text of a PDF or DOCX document."""
        if content_type == PDF_MIME_TYPE:
            text = DocumentParser.parse_pdf(data)
        elif content_type == DOCX_MIME_TYPE:
            text = DocumentParser.parse_docx(data)
        else:
            raise InputValidationError("Unsupported file type. Please upload PDF or DOCX files.")

        return sanitize_text(text)

    @staticmethod
    def parse_pdf(data: bytes) -> str:
        # Try PyMuPDF first
        try:
            return DocumentParser._parse_with_pymupdf(data)
        except Exception as e:
            logger.warning(f"PyMuPDF failed, falling back to pdfplumber: {e}")
            return DocumentParser._parse_with_pdfplumber(data)

    @staticmethod
    def _parse_with_pymupdf(data: bytes) -> str:
        with fitz.open(stream=data, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
        return " ".join(pages)

    @staticmethod
    def _parse_with_pdfplumber(data: bytes) -> str:
        raw_text = ""
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                text = page.extract_text()
                if text:
                    raw_text += text + "\n"
        return raw_text

    @staticmethod
    def parse_docx(data: bytes) -> str:
        doc = Document(io.BytesIO(data))
        parts = [p.text for p in doc.paragraphs if p.text.strip()]

        # Tables are not part of doc.paragraphs
        for table in doc.tables:
            for row in table.rows:
                for cell in row.cells:
                    if cell.text.strip():
                        parts.append(cell.text)

        return "\n".join(parts)
