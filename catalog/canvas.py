"""
Drawing surface for catalog PDFs.

Wraps a reportlab canvas so layouts can work in millimetres with a
top-left origin (y grows downwards). Text ``y`` values are baselines.
Every page keeps a record of its category label and the strings drawn on
it.
"""

import io
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .layout import A4_HEIGHT_MM, A4_WIDTH_MM, LayoutPosition

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'

RGB = Tuple[int, int, int]


def rgb(color: RGB) -> Color:
    r, g, b = color
    return Color(r / 255.0, g / 255.0, b / 255.0)


@dataclass
class PageRecord:
    number: int
    category: Optional[str] = None
    texts: List[str] = field(default_factory=list)


class CatalogCanvas:
    """A4 portrait canvas addressed in millimetres from the top-left corner"""

    def __init__(self, width: float = A4_WIDTH_MM, height: float = A4_HEIGHT_MM):
        self.width = width
        self.height = height
        self._buffer = io.BytesIO()
        self.c = canvas.Canvas(self._buffer, pagesize=(width * mm, height * mm), pageCompression=1)
        self.pages: List[PageRecord] = [PageRecord(number=1)]
        self._finished = False

    # Pages

    @property
    def page(self) -> PageRecord:
        return self.pages[-1]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def new_page(self):
        self.c.showPage()
        self.pages.append(PageRecord(number=len(self.pages) + 1))

    def set_metadata(self, title: str, subject: str, author: str, keywords: str, creator: str):
        self.c.setTitle(title)
        self.c.setSubject(subject)
        self.c.setAuthor(author)
        self.c.setKeywords(keywords)
        self.c.setCreator(creator)

    def finish(self) -> bytes:
        """Close the document and return the PDF bytes"""
        if not self._finished:
            self.c.save()
            self._finished = True
            logger.debug(f"PDF finalized: {self.page_count} pages, {len(self._buffer.getvalue())} bytes")
        return self._buffer.getvalue()

    # Coordinates

    def _y(self, y: float) -> float:
        return (self.height - y) * mm

    # Drawing primitives

    def rect(self, x: float, y: float, w: float, h: float, fill: Optional[RGB] = None,
             stroke: Optional[RGB] = None, line_width: float = 0.2, radius: float = 0):
        self.c.saveState()
        if fill:
            self.c.setFillColor(rgb(fill))
        if stroke:
            self.c.setStrokeColor(rgb(stroke))
            self.c.setLineWidth(line_width * mm)
        args = (x * mm, self._y(y + h), w * mm, h * mm)
        if radius > 0:
            self.c.roundRect(*args, radius * mm, fill=1 if fill else 0, stroke=1 if stroke else 0)
        else:
            self.c.rect(*args, fill=1 if fill else 0, stroke=1 if stroke else 0)
        self.c.restoreState()

    def line(self, x1: float, y1: float, x2: float, y2: float, color: RGB = (220, 220, 220),
             width: float = 0.2, dash: Optional[Sequence[float]] = None):
        self.c.saveState()
        self.c.setStrokeColor(rgb(color))
        self.c.setLineWidth(width * mm)
        if dash:
            self.c.setDash([d * mm for d in dash])
        self.c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))
        self.c.restoreState()

    def text(self, text: str, x: float, y: float, size: float = 10, bold: bool = False,
             color: RGB = (0, 0, 0), align: str = 'left'):
        """Draw one line of text; ``size`` is in points like any font size"""
        font = FONT_BOLD if bold else FONT_REGULAR
        self.c.saveState()
        self.c.setFont(font, size)
        self.c.setFillColor(rgb(color))
        if align == 'center':
            self.c.drawCentredString(x * mm, self._y(y), text)
        elif align == 'right':
            self.c.drawRightString(x * mm, self._y(y), text)
        else:
            self.c.drawString(x * mm, self._y(y), text)
        self.c.restoreState()
        self.page.texts.append(text)

    def text_width(self, text: str, size: float = 10, bold: bool = False) -> float:
        """Width of ``text`` in millimetres"""
        return stringWidth(text, FONT_BOLD if bold else FONT_REGULAR, size) / mm

    def split_text(self, text: str, max_width: float, size: float = 10, bold: bool = False) -> List[str]:
        """Word-wrap ``text`` to lines no wider than ``max_width`` millimetres"""
        if not text:
            return []
        font = FONT_BOLD if bold else FONT_REGULAR
        return simpleSplit(text, font, size, max_width * mm)

    def image(self, image, box: LayoutPosition):
        """Draw a PIL image stretched to ``box``"""
        reader = ImageReader(image)
        self.c.drawImage(reader, box.x * mm, self._y(box.bottom), box.width * mm, box.height * mm,
                         mask='auto')
