"""
Unit tests for the envelope decoder (email_parser.py).
"""

from email.message import EmailMessage

import pytest

from extractor.shared.exceptions import DecodeError
from lambdas.extract_attachments.email_parser import (
    AttachmentPart,
    Envelope,
    decode_envelope,
)


class TestAttachmentPart:
    """Tests for AttachmentPart dataclass."""

    def test_size_bytes(self):
        part = AttachmentPart(filename="a.pdf", content=b"12345")
        assert part.size_bytes == 5

    def test_frozen(self):
        part = AttachmentPart(filename="a.pdf", content=b"x")
        with pytest.raises(Exception):  # FrozenInstanceError
            part.filename = "b.pdf"


class TestDecodeEnvelope:
    """Tests for decode_envelope()."""

    def test_attachments_in_document_order(self, sample_email_raw):
        envelope = decode_envelope(sample_email_raw)

        assert isinstance(envelope, Envelope)
        assert [a.filename for a in envelope.attachments] == [
            "notes.txt",
            "contract.pdf",
            "manual.EPUB",
        ]

    def test_content_is_transfer_decoded(self, sample_email_raw):
        envelope = decode_envelope(sample_email_raw)
        pdf = envelope.attachments[1]

        assert pdf.content == b"%PDF-1.7 contract"
        assert pdf.content_type == "application/pdf"

    def test_headers_are_exposed(self, sample_email_raw):
        envelope = decode_envelope(sample_email_raw)

        assert envelope.subject == "Your documents"
        assert "sender@example.com" in envelope.from_address
        assert envelope.message_id == "<msg-001@mail.example.com>"

    def test_body_is_not_an_attachment(self, build_raw_email):
        envelope = decode_envelope(build_raw_email([]))

        assert envelope.attachments == ()

    def test_encoded_filename_is_decoded(self, build_raw_email):
        raw = build_raw_email([("Überweisung März.pdf", b"%PDF", "application/pdf")])

        envelope = decode_envelope(raw)

        assert envelope.attachments[0].filename == "Überweisung März.pdf"

    def test_inline_part_is_not_an_attachment(self):
        msg = EmailMessage()
        msg["From"] = "sender@example.com"
        msg["Subject"] = "Inline"
        msg.set_content("see image")
        msg.add_related(b"\x89PNG", maintype="image", subtype="png", cid="<logo>")
        msg.add_attachment(
            b"%PDF",
            maintype="application",
            subtype="pdf",
            filename="logo.pdf",
            disposition="inline",
        )

        envelope = decode_envelope(msg.as_bytes())

        assert envelope.attachments == ()

    def test_unnamed_attachment_gets_fallback_name(self):
        msg = EmailMessage()
        msg["From"] = "sender@example.com"
        msg.set_content("body")
        msg.add_attachment(b"%PDF", maintype="application", subtype="pdf", disposition="attachment")

        envelope = decode_envelope(msg.as_bytes())

        assert envelope.attachments[0].filename == "attachment.pdf"

    def test_empty_attachment_is_skipped(self, build_raw_email):
        raw = build_raw_email([("empty.pdf", b"", "application/pdf")])

        assert decode_envelope(raw).attachments == ()

    def test_non_multipart_attachment(self):
        raw = (
            b"From: sender@example.com\r\n"
            b"Subject: single part\r\n"
            b"MIME-Version: 1.0\r\n"
            b"Content-Type: application/pdf\r\n"
            b"Content-Disposition: attachment; filename=\"solo.pdf\"\r\n"
            b"Content-Transfer-Encoding: base64\r\n"
            b"\r\n"
            b"JVBERi0xLjc=\r\n"
        )

        envelope = decode_envelope(raw)

        assert len(envelope.attachments) == 1
        assert envelope.attachments[0].filename == "solo.pdf"
        assert envelope.attachments[0].content == b"%PDF-1.7"

    @pytest.mark.parametrize("raw", [b"", b"   \r\n", b"no headers at all"])
    def test_undecodable_input_raises(self, raw):
        with pytest.raises(DecodeError):
            decode_envelope(raw)
