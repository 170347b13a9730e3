"""
Inputs shared by every signed-document generation step.

SignatureInfo describes one signing event; GenerationContext carries the
resources (product name, font files, HTTP client, fallback policy) that would
otherwise be process-wide globals. Both are immutable and safe to share
between concurrent generations.
"""
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, TYPE_CHECKING

import httpx

from quickink.pdf.errors import SignerValidationError
from quickink.utils.datetime_utils import parse_timestamp

if TYPE_CHECKING:
    from quickink.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "QuickInk"

# Fonts with broad Latin diacritics coverage, first existing file wins
FONT_PATHS = {
    "regular": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    ],
    "bold": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    ],
}

DEFAULT_AUDIT_EVENTS = (
    "Document Created",
    "Document Viewed by Signer",
    "Signature Applied",
    "Document Completed",
)

# Rows the certificate audit trail can hold above the footer on a single page
MAX_AUDIT_ENTRIES = 5


def _find_font(style: str = "regular") -> Optional[str]:
    """Find an installed font file for the given style."""
    for path in FONT_PATHS.get(style, FONT_PATHS["regular"]):
        if os.path.exists(path):
            return path
    return None


@dataclass(frozen=True)
class FontSet:
    """
    TrueType font files for regular and bold text.

    A missing path means the PDF base-14 Helvetica family is used instead.
    """
    regular: Optional[str] = None
    bold: Optional[str] = None

    @classmethod
    def discover(cls) -> "FontSet":
        return cls(regular=_find_font("regular"), bold=_find_font("bold"))


@dataclass(frozen=True)
class SignatureInfo:
    """One signing event, as rendered into the signed document."""
    signature_image_data: str  # data:image/png;base64,...
    signer_name: str
    signer_email: str
    signed_at: str  # ISO-8601
    document_title: str
    ip_address: Optional[str] = None

    @property
    def signed_at_datetime(self) -> datetime:
        """signed_at as an aware UTC datetime."""
        dt = parse_timestamp(self.signed_at)
        if dt is None:
            raise SignerValidationError(
                f"signed_at is not a valid ISO-8601 timestamp: {self.signed_at!r}",
                field="signed_at",
            )
        return dt


@dataclass(frozen=True)
class AuditEntry:
    """A single audit trail line on the signing certificate."""
    event: str
    occurred_at: str  # ISO-8601


def validate_signature_info(info: SignatureInfo) -> None:
    """
    Check the fields every generation path relies on.

    Raises:
        SignerValidationError: naming the first missing or invalid field
    """
    required = (
        ("signer_name", info.signer_name),
        ("signer_email", info.signer_email),
        ("signature_image_data", info.signature_image_data),
        ("document_title", info.document_title),
    )
    for name, value in required:
        if not value or not value.strip():
            raise SignerValidationError(f"{name} is required", field=name)

    # Raises for unparseable timestamps
    info.signed_at_datetime


def default_audit_entries(info: SignatureInfo) -> List[AuditEntry]:
    """The canned audit trail, every event stamped with signed_at."""
    return [AuditEntry(event=event, occurred_at=info.signed_at) for event in DEFAULT_AUDIT_EVENTS]


@dataclass(frozen=True)
class GenerationContext:
    """Resources used to generate signed documents."""
    product_name: str = DEFAULT_PRODUCT_NAME
    fonts: FontSet = field(default_factory=FontSet)
    http_client: Optional[httpx.AsyncClient] = None
    # Compose a certificate instead of failing when the source PDF is unreachable
    fallback_on_fetch_error: bool = False

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "GenerationContext":
        fonts = FontSet.discover() if settings.use_system_fonts else FontSet()
        if settings.use_system_fonts and fonts.regular is None:
            logger.warning("No system TTF font found, falling back to Helvetica")
        return cls(
            product_name=settings.product_name,
            fonts=fonts,
            http_client=http_client,
            fallback_on_fetch_error=settings.certificate_fallback_on_fetch_error,
        )


def resolve_audit_entries(
    info: SignatureInfo,
    audit_entries: Optional[Sequence[AuditEntry]],
) -> List[AuditEntry]:
    """
    Use the caller's audit trail, or the canned one when none is given.

    Raises:
        SignerValidationError: If there are more entries than the certificate holds
    """
    if audit_entries:
        if len(audit_entries) > MAX_AUDIT_ENTRIES:
            raise SignerValidationError(
                f"Audit trail has {len(audit_entries)} entries, at most {MAX_AUDIT_ENTRIES} are allowed",
                field="audit_trail",
            )
        return list(audit_entries)
    return default_audit_entries(info)
