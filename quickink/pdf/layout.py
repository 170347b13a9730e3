"""
Signature block layout and rendering with PyMuPDF (fitz).

Geometry is expressed in PDF points with the PDF origin at the bottom-left,
Y increasing upward. PyMuPDF draws with a top-left origin, so every
coordinate is flipped against the page height right before drawing.

Block layout:
    +------------------------------+
    | Signature                    |
    |      [signature image]       |
    |  --------------------------  |
    |  Jane Doe                    |
    |  jane@example.com            |
    |  Signed: Jan 1, 2024, ...    |
    |  IP: 127.0.0.1               |
    +------------------------------+
"""
import logging
import unicodedata
from dataclasses import dataclass
from typing import Tuple

import fitz  # PyMuPDF

from quickink.pdf.context import FontSet, SignatureInfo
from quickink.pdf.image import SignatureImage
from quickink.utils.datetime_utils import format_short, to_iso_z

logger = logging.getLogger(__name__)

RIGHT_MARGIN = 40
BOTTOM_MARGIN = 50
FOOTER_ALLOWANCE = 30
NEW_PAGE_TOP_OFFSET = 80
# Share of the page height the block (plus margins) may occupy on an existing page
SPACE_THRESHOLD = 0.45

FOOTER_X = 40

BORDER_COLOR = (0.78, 0.8, 0.84)
BACKGROUND_COLOR = (0.98, 0.98, 0.99)
LABEL_COLOR = (0.45, 0.45, 0.5)
DIVIDER_COLOR = (0.6, 0.62, 0.66)
NAME_COLOR = (0.1, 0.1, 0.12)
DETAIL_COLOR = (0.4, 0.4, 0.44)
IP_COLOR = (0.55, 0.55, 0.6)
FOOTER_COLOR = (0.6, 0.6, 0.6)
FOOTER_DETAIL_COLOR = (0.7, 0.7, 0.7)

FONT_NAME_REGULAR = "qiregular"
FONT_NAME_BOLD = "qibold"


@dataclass(frozen=True)
class BlockGeometry:
    """Fixed dimensions of the signature block."""
    width: float = 260
    height: float = 160
    padding: float = 12
    image_max_width: float = 220
    image_max_height: float = 70


DEFAULT_GEOMETRY = BlockGeometry()


@dataclass(frozen=True)
class BlockPlacement:
    """
    Where the block goes.

    x, y: bottom-left corner of the block in PDF coordinates.
    new_page: True when a page must be appended to hold the block.
    """
    new_page: bool
    x: float
    y: float


def required_space(geometry: BlockGeometry = DEFAULT_GEOMETRY) -> float:
    """Vertical space the block needs above the bottom edge, footer included."""
    return geometry.height + BOTTOM_MARGIN + FOOTER_ALLOWANCE


def plan_placement(
    page_width: float,
    page_height: float,
    geometry: BlockGeometry = DEFAULT_GEOMETRY,
) -> BlockPlacement:
    """
    Decide between the existing last page and a new page.

    The block stays on the last page (bottom-right) only while its required
    space is strictly below 45% of the page height. Page content is not
    inspected. Otherwise a page of the same size is appended and the block is
    anchored near its top-right.
    """
    x = page_width - geometry.width - RIGHT_MARGIN

    if required_space(geometry) < page_height * SPACE_THRESHOLD:
        return BlockPlacement(new_page=False, x=x, y=BOTTOM_MARGIN)

    return BlockPlacement(
        new_page=True,
        x=x,
        y=page_height - geometry.height - NEW_PAGE_TOP_OFFSET,
    )


def fit_image(
    width: float,
    height: float,
    max_width: float,
    max_height: float,
) -> Tuple[float, float]:
    """
    Scale (width, height) into the bounding box, preserving aspect ratio.

    Images are never upscaled.
    """
    scale = min(max_width / width, max_height / height, 1)
    return width * scale, height * scale


def to_base14_text(text: str) -> str:
    """Strip diacritics and drop characters base-14 Helvetica cannot show."""
    normalized = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in normalized if not unicodedata.combining(c))
    return stripped.encode("latin-1", errors="replace").decode("latin-1")


def insert_text(
    page: fitz.Page,
    point: fitz.Point,
    text: str,
    fonts: FontSet,
    size: float,
    color: Tuple[float, float, float],
    bold: bool = False,
) -> None:
    """Insert one line of text at a baseline point (top-left origin)."""
    font_path = fonts.bold if bold else fonts.regular

    if font_path:
        try:
            page.insert_text(
                point,
                text,
                fontname=FONT_NAME_BOLD if bold else FONT_NAME_REGULAR,
                fontfile=font_path,
                fontsize=size,
                color=color,
            )
            return
        except Exception as e:
            logger.warning(f"Font {font_path} failed, using Helvetica: {e}")

    page.insert_text(
        point,
        to_base14_text(text),
        fontname="hebo" if bold else "helv",
        fontsize=size,
        color=color,
    )


def draw_signature_block(
    page: fitz.Page,
    info: SignatureInfo,
    image: SignatureImage,
    placement: BlockPlacement,
    fonts: FontSet,
    geometry: BlockGeometry = DEFAULT_GEOMETRY,
) -> fitz.Rect:
    """
    Render the signature block onto a page.

    Returns:
        Rectangle (top-left origin) the signature image was drawn into
    """
    page_height = page.rect.height
    bx, by = placement.x, placement.y
    width, height, padding = geometry.width, geometry.height, geometry.padding

    def flip(y: float) -> float:
        return page_height - y

    # Background with border
    shape = page.new_shape()
    shape.draw_rect(fitz.Rect(bx, flip(by + height), bx + width, flip(by)))
    shape.finish(color=BORDER_COLOR, fill=BACKGROUND_COLOR, width=0.75)
    shape.commit()

    insert_text(
        page,
        fitz.Point(bx + padding, flip(by + height - padding - 9)),
        "Signature",
        fonts,
        size=8,
        color=LABEL_COLOR,
        bold=True,
    )

    # Image centered horizontally, hanging below the label
    sig_width, sig_height = fit_image(
        image.width, image.height, geometry.image_max_width, geometry.image_max_height
    )
    sig_x = bx + (width - sig_width) / 2
    sig_y = by + height - padding - 18 - sig_height
    image_rect = fitz.Rect(sig_x, flip(sig_y + sig_height), sig_x + sig_width, flip(sig_y))
    page.insert_image(image_rect, stream=image.data, keep_proportion=True)

    line_y = sig_y - 6
    shape = page.new_shape()
    shape.draw_line(
        fitz.Point(bx + padding, flip(line_y)),
        fitz.Point(bx + width - padding, flip(line_y)),
    )
    shape.finish(color=DIVIDER_COLOR, width=0.75)
    shape.commit()

    text_x = bx + padding
    text_y = line_y - 14

    insert_text(page, fitz.Point(text_x, flip(text_y)), info.signer_name, fonts,
                size=10, color=NAME_COLOR, bold=True)
    text_y -= 13

    insert_text(page, fitz.Point(text_x, flip(text_y)), info.signer_email, fonts,
                size=8, color=DETAIL_COLOR)
    text_y -= 12

    insert_text(page, fitz.Point(text_x, flip(text_y)),
                f"Signed: {format_short(info.signed_at_datetime)}", fonts,
                size=8, color=DETAIL_COLOR)
    text_y -= 11

    if info.ip_address:
        insert_text(page, fitz.Point(text_x, flip(text_y)), f"IP: {info.ip_address}", fonts,
                    size=7, color=IP_COLOR)

    return image_rect


def draw_footer(
    page: fitz.Page,
    info: SignatureInfo,
    fonts: FontSet,
    product_name: str,
) -> None:
    """Two-line attribution footer at the bottom-left of the page."""
    page_height = page.rect.height

    insert_text(
        page,
        fitz.Point(FOOTER_X, page_height - 22),
        f"Electronically signed via {product_name}",
        fonts,
        size=8,
        color=FOOTER_COLOR,
    )
    insert_text(
        page,
        fitz.Point(FOOTER_X, page_height - 11),
        f"Document: {info.document_title}  |  Completed: {to_iso_z(info.signed_at_datetime)}",
        fonts,
        size=7,
        color=FOOTER_DETAIL_COLOR,
    )
