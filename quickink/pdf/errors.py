"""
Errors raised while producing a signed document.
"""
from typing import Optional


class SignedDocumentError(Exception):
    """Base error for signed document generation."""

    code = "SIGNED_DOCUMENT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ImageDecodeError(SignedDocumentError):
    """Signature image data URI is malformed or not a readable image."""

    code = "IMAGE_DECODE_ERROR"


class FetchError(SignedDocumentError):
    """Source document could not be retrieved."""

    code = "FETCH_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class DocumentLoadError(SignedDocumentError):
    """Source bytes are not a loadable PDF document."""

    code = "DOCUMENT_LOAD_ERROR"


class SignerValidationError(SignedDocumentError):
    """Required signer fields are missing or invalid."""

    code = "SIGNER_VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
