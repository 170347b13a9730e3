from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quickink.pdf.context import MAX_AUDIT_ENTRIES, AuditEntry, SignatureInfo
from quickink.utils.datetime_utils import parse_timestamp, to_iso_z, utc_now


class BaseRequest(BaseModel):
    """Base class for all request models - ignores extra fields."""
    model_config = ConfigDict(extra="ignore")


class AuditEntryInput(BaseRequest):
    event: str = Field(..., min_length=1, max_length=200)
    occurred_at: str = Field(..., description="ISO-8601 timestamp")

    @field_validator("occurred_at")
    @classmethod
    def validate_occurred_at(cls, v: str) -> str:
        if parse_timestamp(v) is None:
            raise ValueError("occurred_at must be an ISO-8601 timestamp")
        return v


class SignedDocumentRequest(BaseRequest):
    source_document_url: Optional[str] = Field(
        default=None,
        description="PDF to embed the signature into; a certificate is generated when empty",
    )
    signature_image_data: str = Field(..., min_length=1, description="data:image/png;base64,...")
    signer_name: str = Field(..., min_length=1, max_length=200)
    signer_email: str = Field(..., min_length=3, max_length=320)
    signed_at: Optional[str] = Field(default=None, description="ISO-8601, defaults to now")
    ip_address: Optional[str] = Field(default=None, description="Defaults to the client IP")
    document_title: str = Field(..., min_length=1, max_length=500)
    audit_trail: Optional[List[AuditEntryInput]] = Field(default=None, max_length=MAX_AUDIT_ENTRIES)

    @field_validator("signer_name", "signer_email", "document_title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be blank")
        return v

    @field_validator("signer_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("signed_at")
    @classmethod
    def validate_signed_at(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and parse_timestamp(v) is None:
            raise ValueError("signed_at must be an ISO-8601 timestamp")
        return v

    def to_signature_info(self, client_ip: Optional[str] = None) -> SignatureInfo:
        return SignatureInfo(
            signature_image_data=self.signature_image_data,
            signer_name=self.signer_name,
            signer_email=self.signer_email,
            signed_at=self.signed_at or to_iso_z(utc_now()),
            document_title=self.document_title,
            ip_address=self.ip_address or client_ip,
        )

    def to_audit_entries(self) -> Optional[List[AuditEntry]]:
        if not self.audit_trail:
            return None
        return [AuditEntry(event=e.event, occurred_at=e.occurred_at) for e in self.audit_trail]


class StoreSignedDocumentRequest(SignedDocumentRequest):
    document_id: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_-]+$")


class SignedDocumentResponse(BaseModel):
    document_id: str
    generated: bool
    signed_pdf_url: Optional[str] = None
    path: Optional[str] = None
    error: Optional[str] = None
