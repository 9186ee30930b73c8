"""
Fonts used to draw contract documents.

Contributor names and addresses can be in any script, so both renderers draw
with an embedded TrueType font. The standard Helvetica pair is only used when
the font files can't be loaded.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from royalty_docs.core.config import settings

logger = logging.getLogger(__name__)

FONTS_DIR = Path(__file__).resolve().parent.parent / "fonts"
DEFAULT_REGULAR = FONTS_DIR / "DejaVuSans.ttf"
DEFAULT_BOLD = FONTS_DIR / "DejaVuSans-Bold.ttf"

REGULAR_NAME = "ContractSans"
BOLD_NAME = "ContractSans-Bold"


@dataclass(frozen=True)
class DocumentFonts:
    regular: str
    bold: str

    @property
    def embedded(self) -> bool:
        return self.regular not in pdfmetrics.standardFonts


STANDARD_FONTS = DocumentFonts(regular="Helvetica", bold="Helvetica-Bold")


def _register(name: str, path: Union[str, Path]) -> bool:
    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except (TTFError, OSError) as e:
        logger.warning(f"Could not load font {path}: {e}")
        return False
    return True


def load_fonts(
    regular_path: Optional[Union[str, Path]] = None,
    bold_path: Optional[Union[str, Path]] = None,
    prefix: str = "",
) -> DocumentFonts:
    """Register the TrueType pair; a missing bold face reuses the regular one."""
    regular_name = f"{prefix}{REGULAR_NAME}"
    bold_name = f"{prefix}{BOLD_NAME}"

    if not _register(regular_name, regular_path or DEFAULT_REGULAR):
        logger.warning("Falling back to Helvetica, non-Latin text will not render")
        return STANDARD_FONTS
    if not _register(bold_name, bold_path or DEFAULT_BOLD):
        return DocumentFonts(regular=regular_name, bold=regular_name)
    return DocumentFonts(regular=regular_name, bold=bold_name)


@lru_cache
def document_fonts() -> DocumentFonts:
    """Fonts configured for this process, registered once."""
    return load_fonts(settings.CONTRACT_FONT_PATH, settings.CONTRACT_BOLD_FONT_PATH)
