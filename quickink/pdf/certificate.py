"""
Signing certificate generator.
Creates a standalone one-page PDF with the signing details when there is no
source document to embed the signature into.
"""
import io
import logging
import os
from datetime import datetime
from typing import Optional, Sequence, Tuple

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from quickink.pdf.context import (
    AuditEntry,
    FontSet,
    GenerationContext,
    SignatureInfo,
    resolve_audit_entries,
    validate_signature_info,
)
from quickink.pdf.image import load_signature_image
from quickink.pdf.layout import fit_image, to_base14_text
from quickink.utils.datetime_utils import (
    epoch_millis,
    format_audit,
    format_long,
    parse_timestamp,
    to_base36,
    to_iso_z,
    utc_now,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = (595.28, 841.89)  # A4 in points
MARGIN = 50

BRAND_COLOR = (0.145, 0.388, 0.922)
HEADING_COLOR = (0.2, 0.2, 0.2)

SIGNATURE_BOX_WIDTH = 300
SIGNATURE_BOX_HEIGHT = 120
SIGNATURE_MAX_WIDTH = 260
SIGNATURE_MAX_HEIGHT = 90

BASE14_FONTS = ("Helvetica", "Helvetica-Bold")

FOOTER_RULE_Y = 50
# Lowest audit trail baseline, clear of the footer rule
AUDIT_TRAIL_BOTTOM = 60
AUDIT_ROW_SPACING = 22

LEGAL_NOTICE = (
    "This document has been electronically signed in accordance with the Electronic Signatures in",
    "Global and National Commerce Act (E-SIGN Act) and the Uniform Electronic Transactions Act",
    "(UETA). The electronic signature applied to this document is legally binding and carries the",
    "same legal effect as a handwritten signature. A complete audit trail including IP address,",
    "timestamp, and signer identification has been recorded.",
)


def generate_certificate_id(now: Optional[datetime] = None) -> str:
    """Certificate ID: generation time in epoch milliseconds, base 36, uppercase."""
    return to_base36(epoch_millis(now or utc_now())).upper()


def _register_font(path: str) -> str:
    """Register a TTF with reportlab once and return its font name."""
    name = "QuickInk-" + os.path.splitext(os.path.basename(path))[0]
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, path))
        logger.debug(f"Registered font {name} from {path}")
    return name


def resolve_fonts(fonts: FontSet) -> Tuple[str, str]:
    """Return (regular, bold) reportlab font names, Helvetica when unavailable."""
    regular, bold = "Helvetica", "Helvetica-Bold"
    try:
        if fonts.regular:
            regular = _register_font(fonts.regular)
        if fonts.bold:
            bold = _register_font(fonts.bold)
    except Exception as e:
        logger.warning(f"Failed to register TTF fonts, using Helvetica: {e}")
        regular, bold = "Helvetica", "Helvetica-Bold"
    return regular, bold


class CertificateComposer:
    """Draws the signing certificate onto a single reportlab canvas page."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.font, self.bold_font = resolve_fonts(context.fonts)

    def compose(
        self,
        info: SignatureInfo,
        audit_entries: Optional[Sequence[AuditEntry]] = None,
        now: Optional[datetime] = None,
    ) -> bytes:
        """
        Build the certificate PDF.

        Args:
            info: Signing event
            audit_entries: Ordered audit trail; defaults to the canned four
                events stamped with signed_at
            now: Generation time, used for the certificate ID

        Returns:
            PDF bytes

        Raises:
            SignerValidationError: If signer fields are missing or the audit
                trail has more entries than fit on the page
            ImageDecodeError: If the signature image cannot be decoded
        """
        validate_signature_info(info)
        image = load_signature_image(info.signature_image_data)
        signed_at = info.signed_at_datetime
        entries = resolve_audit_entries(info, audit_entries)
        certificate_id = generate_certificate_id(now)

        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
        c.setTitle(f"Signing Certificate - {info.document_title}")
        c.setAuthor(self.context.product_name)
        c.setSubject(f"Certificate ID: {certificate_id}")
        c.setCreator(f"{self.context.product_name} E-Signature")

        width, height = PAGE_SIZE
        y = height - MARGIN

        y = self._draw_header(c, y, width)

        y = self._draw_title(c, y, width)

        y = self._draw_section_heading(c, "Document Details", y)
        y = self._draw_info_row(c, "Document Title:", info.document_title, y)
        y = self._draw_info_row(c, "Date Signed:", format_long(signed_at), y)
        y = self._draw_info_row(c, "Status:", "COMPLETED", y)
        y -= 15

        y = self._draw_section_heading(c, "Signer Details", y)
        y = self._draw_info_row(c, "Name:", info.signer_name, y)
        y = self._draw_info_row(c, "Email:", info.signer_email, y)
        if info.ip_address:
            y = self._draw_info_row(c, "IP Address:", info.ip_address, y)
        y = self._draw_info_row(c, "Timestamp:", to_iso_z(signed_at), y)
        y -= 30

        y = self._draw_signature_section(c, info, image, y)
        y = self._draw_legal_notice(c, y, width)
        self._draw_audit_trail(c, entries, y)
        self._draw_footer(c, width, certificate_id)

        c.showPage()
        c.save()

        pdf_bytes = buffer.getvalue()
        logger.info(
            f"Generated signing certificate {certificate_id} "
            f"({len(entries)} audit entries, {len(pdf_bytes)} bytes)"
        )
        return pdf_bytes

    def _draw_text(self, c: canvas.Canvas, x: float, y: float, text: str, font: str, size: float) -> None:
        """Draw caller-supplied text, folded to Latin-1 when a base-14 font is in use."""
        c.setFont(font, size)
        if font in BASE14_FONTS:
            text = to_base14_text(text)
        c.drawString(x, y, text)

    def _draw_header(self, c: canvas.Canvas, y: float, width: float) -> float:
        c.setFillColorRGB(*BRAND_COLOR)
        c.rect(0, y - 30, width, 80, stroke=0, fill=1)

        c.setFillColorRGB(1, 1, 1)
        self._draw_text(c, MARGIN, y - 5, self.context.product_name, self.bold_font, 28)

        c.setFillColorRGB(0.85, 0.9, 1)
        c.setFont(self.font, 12)
        c.drawString(MARGIN, y - 25, "E-Signature Certificate")

        return y - 100

    def _draw_title(self, c: canvas.Canvas, y: float, width: float) -> float:
        c.setFillColorRGB(0.1, 0.1, 0.1)
        c.setFont(self.bold_font, 20)
        c.drawString(MARGIN, y, "SIGNING CERTIFICATE")
        y -= 15

        c.setStrokeColorRGB(*BRAND_COLOR)
        c.setLineWidth(2)
        c.line(MARGIN, y, width - MARGIN, y)

        return y - 35

    def _draw_section_heading(self, c: canvas.Canvas, title: str, y: float) -> float:
        c.setFillColorRGB(*HEADING_COLOR)
        c.setFont(self.bold_font, 14)
        c.drawString(MARGIN, y, title)
        return y - 25

    def _draw_info_row(self, c: canvas.Canvas, label: str, value: str, y: float) -> float:
        c.setFillColorRGB(0.4, 0.4, 0.4)
        c.setFont(self.bold_font, 10)
        c.drawString(MARGIN + 10, y, label)

        c.setFillColorRGB(0.15, 0.15, 0.15)
        self._draw_text(c, MARGIN + 140, y, value, self.font, 10)
        return y - 20

    def _draw_signature_section(self, c: canvas.Canvas, info: SignatureInfo, image, y: float) -> float:
        c.setFillColorRGB(*HEADING_COLOR)
        c.setFont(self.bold_font, 14)
        c.drawString(MARGIN, y, "Signature")
        y -= 15

        box_bottom = y - SIGNATURE_BOX_HEIGHT
        c.setFillColorRGB(0.97, 0.97, 0.97)
        c.setStrokeColorRGB(0.8, 0.8, 0.8)
        c.setLineWidth(1)
        c.rect(MARGIN, box_bottom, SIGNATURE_BOX_WIDTH, SIGNATURE_BOX_HEIGHT, stroke=1, fill=1)

        sig_width, sig_height = fit_image(
            image.width, image.height, SIGNATURE_MAX_WIDTH, SIGNATURE_MAX_HEIGHT
        )
        c.drawImage(
            ImageReader(io.BytesIO(image.data)),
            MARGIN + (SIGNATURE_BOX_WIDTH - sig_width) / 2,
            y - 110 + (SIGNATURE_MAX_HEIGHT - sig_height) / 2,
            width=sig_width,
            height=sig_height,
            mask="auto",
        )

        c.setStrokeColorRGB(0.6, 0.6, 0.6)
        c.setLineWidth(0.5)
        c.line(MARGIN + 20, y - 105, MARGIN + 280, y - 105)

        c.setFillColorRGB(0.4, 0.4, 0.4)
        self._draw_text(c, MARGIN + 20, y - 118, info.signer_name, self.font, 9)

        return y - 160

    def _draw_legal_notice(self, c: canvas.Canvas, y: float, width: float) -> float:
        c.setFillColorRGB(0.96, 0.97, 0.98)
        c.setStrokeColorRGB(0.85, 0.87, 0.9)
        c.setLineWidth(1)
        c.rect(MARGIN, y - 90, width - MARGIN * 2, 90, stroke=1, fill=1)

        c.setFillColorRGB(0.3, 0.3, 0.3)
        c.setFont(self.bold_font, 10)
        c.drawString(MARGIN + 15, y - 18, "Legal Notice")

        c.setFillColorRGB(0.45, 0.45, 0.45)
        c.setFont(self.font, 8)
        line_y = y - 35
        for line in LEGAL_NOTICE:
            c.drawString(MARGIN + 15, line_y, line)
            line_y -= 12

        return y - 110

    def _draw_audit_trail(self, c: canvas.Canvas, entries: Sequence[AuditEntry], y: float) -> float:
        y = self._draw_section_heading(c, "Audit Trail", y)

        # Tighten rows so the last entry stays above the footer rule
        spacing = AUDIT_ROW_SPACING
        if len(entries) > 1:
            spacing = min(spacing, (y - AUDIT_TRAIL_BOTTOM) / (len(entries) - 1))

        for entry in entries:
            occurred_at = parse_timestamp(entry.occurred_at)
            when = format_audit(occurred_at) if occurred_at else entry.occurred_at

            c.setFillColorRGB(*BRAND_COLOR)
            c.circle(MARGIN + 8, y + 3, 3, stroke=0, fill=1)

            c.setFillColorRGB(0.2, 0.2, 0.2)
            self._draw_text(c, MARGIN + 20, y, entry.event, self.font, 10)

            c.setFillColorRGB(0.5, 0.5, 0.5)
            self._draw_text(c, MARGIN + 250, y, when, self.font, 9)

            y -= spacing

        return y

    def _draw_footer(self, c: canvas.Canvas, width: float, certificate_id: str) -> None:
        c.setStrokeColorRGB(0.8, 0.8, 0.8)
        c.setLineWidth(0.5)
        c.line(MARGIN, FOOTER_RULE_Y, width - MARGIN, FOOTER_RULE_Y)

        c.setFillColorRGB(0.6, 0.6, 0.6)
        self._draw_text(
            c, MARGIN, 35,
            f"Generated by {self.context.product_name} - Self-Hosted E-Signature Solution",
            self.font, 8,
        )
        c.drawString(width - MARGIN - 180, 35, f"Certificate ID: {certificate_id}")


def compose_certificate(
    info: SignatureInfo,
    context: GenerationContext,
    audit_entries: Optional[Sequence[AuditEntry]] = None,
    now: Optional[datetime] = None,
) -> bytes:
    """Build a standalone signing certificate PDF."""
    return CertificateComposer(context).compose(info, audit_entries=audit_entries, now=now)
