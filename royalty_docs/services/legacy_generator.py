"""
Legacy contract generator.

Draws the whole agreement from scratch on one A4 page, without any template.
Sections, top to bottom: masthead, title, reference/effective date, PARTIES,
RECORDING INFORMATION, ROYALTY SPLIT, NOTES, SIGNATURES.

Contributor and notes lines stop once the cursor reaches the body floor
(bottom margin plus the reserved signature block). Nothing is paginated.
"""

import io
import logging
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from royalty_docs.services.document_context import DocumentContext
from royalty_docs.services.fonts import DocumentFonts, document_fonts
from royalty_docs.services.split_ledger import Role
from royalty_docs.services.text_layout import (
    EMPTY,
    format_percent,
    share_to_percent,
    truncate_line,
    wrap_lines,
)

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_X = 56
TOP_Y = PAGE_HEIGHT - 56
MIN_Y = 56
SIGNATURE_BLOCK_HEIGHT = 96
BODY_FLOOR = MIN_Y + SIGNATURE_BLOCK_HEIGHT

NOTES_MAX_CHARS = 1200
LINE_CHARS = 96
BODY_SIZE = 9
LINE_HEIGHT = 12


class _Page:
    """Top-down text cursor over a reportlab canvas."""

    def __init__(self, c: canvas.Canvas, fonts: DocumentFonts):
        self.c = c
        self.fonts = fonts
        self.y = TOP_Y

    def has_room(self, height: float = LINE_HEIGHT, floor: float = BODY_FLOOR) -> bool:
        return self.y - height >= floor

    def gap(self, height: float) -> None:
        self.y -= height

    def text(self, value: str, size: float = BODY_SIZE, bold: bool = False, indent: float = 0) -> None:
        self.c.setFont(self.fonts.bold if bold else self.fonts.regular, size)
        self.c.drawString(MARGIN_X + indent, self.y, truncate_line(value, LINE_CHARS))
        self.y -= max(LINE_HEIGHT, size + 3)

    def heading(self, value: str) -> None:
        self.gap(6)
        self.c.setFont(self.fonts.bold, 10)
        self.c.drawString(MARGIN_X, self.y, value)
        self.c.setStrokeColor(colors.grey)
        self.c.line(MARGIN_X, self.y - 3, PAGE_WIDTH - MARGIN_X, self.y - 3)
        self.y -= 16


def _masthead(page: _Page, ctx: DocumentContext) -> None:
    c = page.c
    c.setFont(page.fonts.bold, 16)
    c.drawString(MARGIN_X, page.y, truncate_line(ctx.label.name, 40))
    c.setFont(page.fonts.regular, 8)
    c.drawRightString(PAGE_WIDTH - MARGIN_X, page.y, f"Ref. {truncate_line(ctx.agreement_reference_no, 36)}")
    page.y -= 14

    contact = [line for line in ctx.label.address_lines]
    contact += [v for v in (ctx.label.email, ctx.label.phone) if v]
    if contact:
        page.text(" | ".join(contact), size=8)

    page.gap(14)
    c.setFont(page.fonts.bold, 14)
    c.drawCentredString(PAGE_WIDTH / 2, page.y, ctx.title)
    page.y -= 22


def _agreement_header(page: _Page, ctx: DocumentContext) -> None:
    page.text(f"Agreement Reference No: {ctx.agreement_reference_no}")
    page.text(f"Effective Date: {ctx.effective_date}")


def _parties(page: _Page, ctx: DocumentContext) -> None:
    page.heading("PARTIES")
    label_address = ", ".join(ctx.label.address_lines) or EMPTY
    page.text(f'1. {ctx.label.name} (the "Label"), {label_address}')

    stage_name = ctx.primary.name if ctx.primary else ctx.artist_names
    page.text(f'2. {ctx.party_legal_name} (the "Artist"), professionally known as {stage_name}')
    page.text(f"Phone: {ctx.party_phone}", indent=12)
    page.text(f"Address: {ctx.party_address}", indent=12)
    page.text(f"Email: {ctx.party_email}", indent=12)


def _recording(page: _Page, ctx: DocumentContext) -> None:
    page.heading("RECORDING INFORMATION")
    page.text(f"Release: {ctx.release_name}")
    for index, line in enumerate(wrap_lines(ctx.song_titles, LINE_CHARS - 16, 2) or [EMPTY]):
        page.text(f"Song Title(s): {line}" if index == 0 else line, indent=0 if index == 0 else 62)
    page.text(f"Genre / Type: {ctx.genre}")
    page.text(f"ISRC: {ctx.isrc}")
    page.text(f"Delivery Date: {ctx.delivery_date}")


def _royalty_split(page: _Page, ctx: DocumentContext) -> None:
    page.heading("ROYALTY SPLIT")
    page.text(
        f"Artist share: {share_to_percent(ctx.artist_share)} of net receipts    "
        f"Label share: {share_to_percent(ctx.label_share)} of net receipts"
    )
    if not ctx.split_check.is_balanced and ctx.split_check.count:
        page.text(f"Recorded splits total {format_percent(ctx.split_check.total)} of the artist share.", size=8)

    if not ctx.contributors:
        page.text("No contributors recorded.")
        return

    # Each contributor takes three lines, plus one kept free for the clipping notice
    for index, contributor in enumerate(ctx.contributors):
        is_last = index == len(ctx.contributors) - 1
        if not page.has_room((3 if is_last else 4) * LINE_HEIGHT):
            remaining = len(ctx.contributors) - index
            logger.info(f"Contract {ctx.contract_id}: {remaining} contributor(s) clipped from legacy document")
            if page.has_room():
                page.text(f"... {remaining} more contributor(s) not shown", size=8)
            return
        role = Role.PRIMARY.value if contributor is ctx.primary else contributor.role
        page.text(
            f"{contributor.name} ({role}): "
            f"{format_percent(contributor.percentage_of_artist_share)} of artist share "
            f"({format_percent(contributor.share_of_gross(ctx.artist_share))} of total)",
            bold=True,
        )
        page.text(
            f"Legal name: {contributor.legal_name}   Phone: {contributor.phone}   Email: {contributor.email}",
            size=8,
            indent=12,
        )
        page.text(f"Address: {contributor.address}", size=8, indent=12)


def _notes(page: _Page, ctx: DocumentContext) -> None:
    if not page.has_room(16 + LINE_HEIGHT):
        return
    page.heading("NOTES")

    notes = (ctx.user_notes or "").strip()[:NOTES_MAX_CHARS]
    if not notes:
        page.text(EMPTY)
        return

    for raw_line in notes.splitlines():
        for line in wrap_lines(raw_line, LINE_CHARS, NOTES_MAX_CHARS) or [""]:
            if not page.has_room():
                return
            page.text(line, size=8)


def _signatures(page: _Page, ctx: DocumentContext) -> None:
    c = page.c
    y = MIN_Y + SIGNATURE_BLOCK_HEIGHT - 10
    c.setFont(page.fonts.bold, 10)
    c.drawString(MARGIN_X, y, "SIGNATURES")

    col_width = (PAGE_WIDTH - 2 * MARGIN_X) / 2
    line_y = y - 40
    c.setStrokeColor(colors.black)
    for column, party in enumerate((f"For {ctx.label.name}", "Artist")):
        x = MARGIN_X + column * col_width
        c.line(x, line_y, x + col_width - 24, line_y)
        c.setFont(page.fonts.regular, 8)
        c.drawString(x, line_y - 11, truncate_line(party, 48))
        c.drawString(x, line_y - 22, "Date: ____________________")

    c.setFont(page.fonts.regular, 7)
    c.setFillColor(colors.grey)
    c.drawString(MARGIN_X, MIN_Y - 16, f"Generated on {ctx.generated_at.strftime('%Y-%m-%d %H:%M')} UTC")
    c.setFillColor(colors.black)


def render_legacy_document(ctx: DocumentContext, fonts: Optional[DocumentFonts] = None) -> bytes:
    """Draw the full agreement and return the PDF bytes."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Contract {ctx.agreement_reference_no}")
    c.setAuthor(ctx.label.name)

    page = _Page(c, fonts or document_fonts())
    _masthead(page, ctx)
    _agreement_header(page, ctx)
    _parties(page, ctx)
    _recording(page, ctx)
    _royalty_split(page, ctx)
    _notes(page, ctx)
    _signatures(page, ctx)

    c.showPage()
    c.save()
    return buffer.getvalue()
