"""
Template overlay renderer.

Writes contract values onto the pre-authored contract template. The template
is fixed: every position lives in TEMPLATE_LAYOUT / SCHEDULE_ROW_LAYOUT, so a
new template revision only changes those tables.

An unreadable template raises TemplateUnavailableError; the document service
then falls back to the legacy generator.
"""

import io
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pypdf import PageObject, PdfReader, PdfWriter, Transformation
from pypdf.errors import PyPdfError
from reportlab.pdfgen import canvas

from royalty_docs.core.config import settings
from royalty_docs.services.document_context import DocumentContext
from royalty_docs.services.errors import TemplateUnavailableError
from royalty_docs.services.fonts import DocumentFonts, document_fonts
from royalty_docs.services.split_ledger import PLACEHOLDER
from royalty_docs.services.text_layout import EMPTY, share_to_percent, truncate_line, wrap_lines

logger = logging.getLogger(__name__)
logging.getLogger("pypdf").setLevel(logging.ERROR)

COMPOSITION_OWNERSHIP = "100% Artist"


@dataclass(frozen=True)
class FieldSlot:
    """Where and how one value is written on the template."""
    page: int
    x: float
    y: float
    max_chars: int
    max_lines: int = 1
    bold: bool = False
    size: float = 10
    line_height: float = 12


# Page 1: agreement header and recording information
TEMPLATE_LAYOUT: Dict[str, FieldSlot] = {
    "agreement_reference_no": FieldSlot(page=0, x=182, y=706, max_chars=36),
    "effective_date": FieldSlot(page=0, x=440, y=706, max_chars=12),
    "song_titles": FieldSlot(page=0, x=182, y=628, max_chars=58, max_lines=2),
    "artist_names": FieldSlot(page=0, x=182, y=592, max_chars=58, max_lines=2),
    "genre": FieldSlot(page=0, x=182, y=556, max_chars=40),
    "isrc": FieldSlot(page=0, x=182, y=532, max_chars=20),
    "delivery_date": FieldSlot(page=0, x=440, y=532, max_chars=12),
}

# Royalty schedule table, first row
SCHEDULE_PAGE = 2
SCHEDULE_ROW_LAYOUT: Dict[str, FieldSlot] = {
    "song_title": FieldSlot(page=SCHEDULE_PAGE, x=62, y=618, max_chars=26, size=8),
    "contributors": FieldSlot(page=SCHEDULE_PAGE, x=186, y=618, max_chars=32, size=8),
    "isrc": FieldSlot(page=SCHEDULE_PAGE, x=338, y=618, max_chars=15, size=8),
    "artist_share": FieldSlot(page=SCHEDULE_PAGE, x=418, y=618, max_chars=8, size=8),
    "label_share": FieldSlot(page=SCHEDULE_PAGE, x=468, y=618, max_chars=8, size=8),
    "composition_ownership": FieldSlot(page=SCHEDULE_PAGE, x=516, y=618, max_chars=14, size=8),
}


def load_template(path: Optional[str] = None) -> PdfReader:
    """Open the contract template or raise TemplateUnavailableError."""
    path = path or settings.template_path
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as e:
        raise TemplateUnavailableError(f"Contract template not readable at {path}: {e}") from e

    if not data:
        raise TemplateUnavailableError(f"Contract template at {path} is empty")

    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            raise TemplateUnavailableError(f"Contract template at {path} is encrypted")
        page_count = len(reader.pages)
    except PyPdfError as e:
        raise TemplateUnavailableError(f"Contract template at {path} is not a valid PDF: {e}") from e

    if page_count == 0:
        raise TemplateUnavailableError(f"Contract template at {path} has no pages")
    return reader


def header_values(ctx: DocumentContext) -> Dict[str, str]:
    return {
        "agreement_reference_no": ctx.agreement_reference_no,
        "effective_date": ctx.effective_date,
        "song_titles": ctx.song_titles,
        "artist_names": ctx.artist_names,
        "genre": ctx.genre,
        "isrc": ctx.isrc,
        "delivery_date": ctx.delivery_date,
    }


def schedule_values(ctx: DocumentContext) -> Dict[str, str]:
    names = [c.name for c in ctx.contributors if c.name != PLACEHOLDER]
    return {
        "song_title": ctx.song_titles,
        "contributors": ", ".join(names) if names else ctx.artist_names,
        "isrc": ctx.isrc,
        "artist_share": share_to_percent(ctx.artist_share),
        "label_share": share_to_percent(ctx.label_share),
        "composition_ownership": COMPOSITION_OWNERSHIP,
    }


def fit_text(value: Optional[str], slot: FieldSlot) -> List[str]:
    """Lines to draw for a slot: truncated single line, or wrapped lines."""
    if slot.max_lines <= 1:
        line = truncate_line(value, slot.max_chars)
        return [line or EMPTY]
    lines = wrap_lines(value, slot.max_chars, slot.max_lines)
    return lines or [EMPTY]


def plan_placements(ctx: DocumentContext, page_count: int) -> Dict[int, List[Tuple[FieldSlot, List[str]]]]:
    """Group fitted text by page index, skipping pages the template lacks."""
    plan: Dict[int, List[Tuple[FieldSlot, List[str]]]] = {}

    for layout, values in (
        (TEMPLATE_LAYOUT, header_values(ctx)),
        (SCHEDULE_ROW_LAYOUT, schedule_values(ctx)),
    ):
        for key, slot in layout.items():
            if slot.page >= page_count:
                continue
            plan.setdefault(slot.page, []).append((slot, fit_text(values.get(key), slot)))

    if SCHEDULE_PAGE >= page_count:
        logger.info(f"Template has {page_count} pages, royalty schedule row skipped")
    return plan


def _overlay_page(
    width: float,
    height: float,
    placements: List[Tuple[FieldSlot, List[str]]],
    fonts: DocumentFonts,
) -> PageObject:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    for slot, lines in placements:
        c.setFont(fonts.bold if slot.bold else fonts.regular, slot.size)
        y = slot.y
        for line in lines:
            c.drawString(slot.x, y, line)
            y -= slot.line_height
    c.showPage()
    c.save()
    buffer.seek(0)
    return PdfReader(buffer).pages[0]


def render_from_template(
    ctx: DocumentContext,
    template_path: Optional[str] = None,
    fonts: Optional[DocumentFonts] = None,
) -> bytes:
    """Overlay contract values on the template and return the PDF bytes."""
    reader = load_template(template_path)
    plan = plan_placements(ctx, len(reader.pages))
    fonts = fonts or document_fonts()

    # Stamps are merged onto the writer's own copies of the template pages
    writer = PdfWriter(clone_from=reader)
    for index, page in enumerate(writer.pages):
        placements = plan.get(index)
        if not placements:
            continue
        box = page.mediabox
        stamp = _overlay_page(float(box.width), float(box.height), placements, fonts)
        page.merge_transformed_page(
            stamp,
            Transformation().translate(float(box.left), float(box.bottom)),
        )

    writer.add_metadata({
        "/Title": f"Contract {ctx.agreement_reference_no}",
        "/Producer": ctx.label.name,
    })

    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()
