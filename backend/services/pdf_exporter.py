import io
import logging
from typing import Optional
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from config import get_settings
from models.content import KeyTerm, SimplifiedContent
from models.language import language_name

logger = logging.getLogger("pdf_exporter")

MARGIN_MM = 20
SEPARATOR_GREY = 200 / 255
CUSTOM_FONT_NAME = "ExportFont"

SECTION_SUMMARY = "1. Summary"
SECTION_KEY_POINTS = "2. Key Points"
SECTION_ELI5 = "3. Simple Explanation"
SECTION_KEY_TERMS = "4. Explain Key Terms"


def export_filename(language: str) -> str:
    return f"simplified-content-{language_name(language).lower()}.pdf"


class PDFLayout:
    """
    Top-down text cursor over a reportlab canvas.
    Positions are millimetres from the top edge; a new page starts once the
    cursor passes the bottom margin.
    """

    def __init__(self, buffer: io.BytesIO, font_path: Optional[str] = None):
        self.canvas = canvas.Canvas(buffer, pagesize=A4)
        self.page_width, self.page_height = A4
        self.margin = MARGIN_MM * mm
        self.max_width = self.page_width - 2 * self.margin
        self.y = MARGIN_MM
        self.page_count = 1
        self.regular_font, self.bold_font = "Helvetica", "Helvetica-Bold"
        self.unicode_font = False

        if font_path:
            pdfmetrics.registerFont(TTFont(CUSTOM_FONT_NAME, font_path))
            self.regular_font = self.bold_font = CUSTOM_FONT_NAME
            self.unicode_font = True

        self.set_font(12)

    @property
    def bottom(self) -> float:
        return self.page_height / mm - MARGIN_MM

    def safe(self, text: str) -> str:
        # The built-in Helvetica only covers cp1252
        if self.unicode_font:
            return text
        return text.encode("cp1252", "replace").decode("cp1252")

    def new_page(self):
        self.canvas.showPage()
        self.page_count += 1
        self.y = MARGIN_MM
        # showPage resets the graphics state
        self.canvas.setFont(self.font_name, self.font_size)

    def break_if_past(self, limit: float):
        if self.y > limit:
            self.new_page()

    def set_font(self, size: float, bold: bool = False):
        self.font_size = size
        self.font_name = self.bold_font if bold else self.regular_font
        self.canvas.setFont(self.font_name, size)

    def draw(self, text: str, indent_mm: float = 0):
        self.canvas.drawString(self.margin + indent_mm * mm, self.page_height - self.y * mm, self.safe(text))

    def wrap(self, text: str) -> list[str]:
        return simpleSplit(self.safe(text), self.font_name, self.font_size, self.max_width)

    def wrapped_text(self, text: str, size: float, bold: bool = False, line_height: Optional[float] = None):
        self.set_font(size, bold)
        step = line_height if line_height is not None else size * 0.5
        for line in self.wrap(text):
            self.break_if_past(self.bottom)
            self.draw(line)
            self.y += step

    def heading(self, text: str, size: float = 16, gap: float = 10):
        self.break_if_past(self.bottom)
        self.set_font(size, bold=True)
        self.draw(text)
        self.y += gap

    def separator(self):
        self.canvas.setStrokeColorRGB(SEPARATOR_GREY, SEPARATOR_GREY, SEPARATOR_GREY)
        line_y = self.page_height - self.y * mm
        self.canvas.line(self.margin, line_y, self.page_width - self.margin, line_y)

    def save(self):
        self.canvas.save()


def export_pdf(
    content: SimplifiedContent,
    key_terms: Optional[list[KeyTerm]] = None,
    font_path: Optional[str] = None,
) -> bytes:
    """Render simplified content (and key terms, if any) into a paginated A4 PDF."""
    if font_path is None:
        font_path = get_settings().PDF_FONT_PATH

    buffer = io.BytesIO()
    layout = PDFLayout(buffer, font_path=font_path)
    has_terms = bool(key_terms)

    # Title
    layout.set_font(24, bold=True)
    layout.draw("Simplified Content")
    layout.y += 15

    # Table of contents
    layout.set_font(18, bold=True)
    layout.draw("Table of Contents")
    layout.y += 10

    layout.set_font(12)
    toc = [SECTION_SUMMARY, SECTION_KEY_POINTS, SECTION_ELI5]
    if has_terms:
        toc.append(SECTION_KEY_TERMS)
    for entry in toc:
        layout.draw(entry, indent_mm=5)
        layout.y += 7

    layout.y += 10
    layout.separator()
    layout.y += 10

    layout.heading(SECTION_SUMMARY)
    layout.wrapped_text(content.summary, 12)
    layout.y += 10

    layout.heading(SECTION_KEY_POINTS)
    for point in content.bullet_points:
        layout.wrapped_text(f"• {point}", 12, line_height=6)
        layout.y += 3
    layout.y += 5

    layout.heading(SECTION_ELI5)
    layout.wrapped_text(content.eli5, 12)
    layout.y += 10

    if has_terms:
        layout.heading(SECTION_KEY_TERMS)
        for term in key_terms:
            # Keep a term and the start of its definition together
            layout.break_if_past(layout.bottom - 20)
            layout.wrapped_text(term.term, 12, bold=True, line_height=7)
            layout.wrapped_text(term.definition, 11)
            layout.y += 8

    layout.save()
    logger.info(f"Exported PDF with {layout.page_count} page(s)")
    return buffer.getvalue()
