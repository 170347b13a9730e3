"""
Tests for the signing certificate generator.
"""
import re
from datetime import datetime, timezone

import fitz  # PyMuPDF
import pytest

from quickink.pdf.certificate import FOOTER_RULE_Y, compose_certificate, generate_certificate_id
from quickink.pdf.context import MAX_AUDIT_ENTRIES, AuditEntry, SignatureInfo
from quickink.pdf.errors import ImageDecodeError, SignerValidationError


def _certificate_text(pdf_bytes: bytes):
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        return doc.page_count, doc[0].get_text()
    finally:
        doc.close()


def _info(**overrides) -> SignatureInfo:
    from tests.conftest import make_png_data_uri

    fields = dict(
        signature_image_data=make_png_data_uri(100, 30),
        signer_name="Jane Doe",
        signer_email="jane@x.com",
        signed_at="2024-01-01T12:00:00Z",
        document_title="Consulting Agreement",
    )
    fields.update(overrides)
    return SignatureInfo(**fields)


class TestComposeCertificate:
    """Tests for compose_certificate()."""

    def test_single_page_with_signer_details(self, context):
        """Certificate is one page with title, name and email."""
        page_count, text = _certificate_text(compose_certificate(_info(), context))

        assert page_count == 1
        assert "SIGNING CERTIFICATE" in text
        assert "Jane Doe" in text
        assert "jane@x.com" in text

    def test_certificate_id_format(self, context):
        _, text = _certificate_text(compose_certificate(_info(), context))

        match = re.search(r"Certificate ID: (\S+)", text)
        assert match is not None
        assert re.match(r"^[0-9A-Z]+$", match.group(1))

    def test_document_details(self, context):
        _, text = _certificate_text(compose_certificate(_info(), context))

        assert "Document Details" in text
        assert "Consulting Agreement" in text
        assert "January 1, 2024 at 12:00:00 PM UTC" in text
        assert "COMPLETED" in text

    def test_signer_timestamp_iso(self, context):
        _, text = _certificate_text(compose_certificate(_info(), context))
        assert "2024-01-01T12:00:00.000Z" in text

    def test_ip_shown_when_present(self, context):
        _, text = _certificate_text(compose_certificate(_info(ip_address="198.51.100.4"), context))
        assert "IP Address:" in text
        assert "198.51.100.4" in text

    def test_ip_omitted_when_absent(self, context):
        _, text = _certificate_text(compose_certificate(_info(), context))
        assert "IP Address:" not in text

    def test_legal_notice(self, context):
        _, text = _certificate_text(compose_certificate(_info(), context))
        assert "Legal Notice" in text
        assert "E-SIGN Act" in text

    def test_default_audit_trail(self, context):
        """Four canned events, all stamped with signed_at."""
        _, text = _certificate_text(compose_certificate(_info(), context))

        for event in (
            "Document Created",
            "Document Viewed by Signer",
            "Signature Applied",
            "Document Completed",
        ):
            assert event in text
        assert text.count("Jan 1, 2024, 12:00 PM") >= 4

    def test_custom_audit_trail(self, context):
        """Caller-provided audit entries replace the canned ones."""
        entries = [
            AuditEntry(event="Request Sent", occurred_at="2024-01-01T09:15:00Z"),
            AuditEntry(event="Signed by Jane", occurred_at="2024-01-02T17:45:00Z"),
        ]
        _, text = _certificate_text(compose_certificate(_info(), context, audit_entries=entries))

        assert "Request Sent" in text
        assert "Jan 1, 2024, 09:15 AM" in text
        assert "Signed by Jane" in text
        assert "Jan 2, 2024, 05:45 PM" in text
        assert "Document Viewed by Signer" not in text

    def test_product_name_in_header_and_footer(self):
        from quickink.pdf.context import GenerationContext

        _, text = _certificate_text(
            compose_certificate(_info(), GenerationContext(product_name="AcmeSign"))
        )
        assert "AcmeSign" in text
        assert "Generated by AcmeSign - Self-Hosted E-Signature Solution" in text

    def test_signature_image_embedded(self, context):
        doc = fitz.open(stream=compose_certificate(_info(), context), filetype="pdf")
        infos = doc[0].get_image_info()
        doc.close()

        assert len(infos) == 1
        bbox = fitz.Rect(infos[0]["bbox"])
        assert bbox.width == pytest.approx(100, abs=0.01)
        assert bbox.height == pytest.approx(30, abs=0.01)

    def test_missing_signer_name_rejected(self, context):
        with pytest.raises(SignerValidationError) as exc_info:
            compose_certificate(_info(signer_name="  "), context)
        assert exc_info.value.field == "signer_name"

    def test_missing_signer_email_rejected(self, context):
        with pytest.raises(SignerValidationError) as exc_info:
            compose_certificate(_info(signer_email=""), context)
        assert exc_info.value.field == "signer_email"

    def test_invalid_signed_at_rejected(self, context):
        with pytest.raises(SignerValidationError) as exc_info:
            compose_certificate(_info(signed_at="yesterday"), context)
        assert exc_info.value.field == "signed_at"

    def test_bad_image_rejected(self, context):
        with pytest.raises(ImageDecodeError):
            compose_certificate(_info(signature_image_data="data:image/png;base64,AAAA"), context)


class TestCertificateId:
    """Tests for generate_certificate_id()."""

    def test_encodes_epoch_millis_base36(self):
        now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        certificate_id = generate_certificate_id(now)

        assert certificate_id == certificate_id.upper()
        assert int(certificate_id, 36) == 1704110400000

    def test_uppercase_alphanumeric(self):
        assert re.match(r"^[0-9A-Z]+$", generate_certificate_id())


class TestCertificateAuditTrailFit:
    """Audit trail rows stay on the page and clear of the footer."""

    def _event_rects(self, pdf_bytes: bytes, events):
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        try:
            page = doc[0]
            return page.rect.height, {event: page.search_for(event) for event in events}
        finally:
            doc.close()

    def test_max_entries_all_visible_above_footer(self, context):
        """With the IP row present the largest allowed trail still fits."""
        entries = [
            AuditEntry(event=f"Reviewed section {i}", occurred_at="2024-01-01T10:00:00Z")
            for i in range(1, MAX_AUDIT_ENTRIES + 1)
        ]
        pdf_bytes = compose_certificate(
            _info(ip_address="198.51.100.4"), context, audit_entries=entries
        )

        page_height, rects = self._event_rects(pdf_bytes, [e.event for e in entries])
        for event, found in rects.items():
            assert len(found) == 1, event
            assert found[0].y1 < page_height - FOOTER_RULE_Y

    def test_default_entries_clear_of_footer(self, context):
        pdf_bytes = compose_certificate(_info(ip_address="198.51.100.4"), context)

        page_height, rects = self._event_rects(pdf_bytes, ["Document Completed"])
        assert rects["Document Completed"][0].y1 < page_height - FOOTER_RULE_Y

    def test_too_many_entries_rejected(self, context):
        entries = [
            AuditEntry(event=f"Event {i}", occurred_at="2024-01-01T10:00:00Z")
            for i in range(12)
        ]
        with pytest.raises(SignerValidationError) as exc_info:
            compose_certificate(_info(), context, audit_entries=entries)
        assert exc_info.value.field == "audit_trail"


class TestCertificateText:
    """Caller-supplied text on the Helvetica fallback."""

    def test_missing_document_title_rejected(self, context):
        with pytest.raises(SignerValidationError) as exc_info:
            compose_certificate(_info(document_title="   "), context)
        assert exc_info.value.field == "document_title"

    def test_diacritics_folded_with_helvetica(self, context):
        """Names render as the same Latin-1 text the signature block uses."""
        _, text = _certificate_text(
            compose_certificate(_info(signer_name="Jiří Novák", document_title="Smlouva č. 5"), context)
        )
        assert "Jiri Novak" in text
        assert "Smlouva c. 5" in text
