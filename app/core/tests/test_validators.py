"""
Tests for upload validators.
"""

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile

from core.validators import validate_content_type, validate_file_size


class TestValidateFileSize:
    def test_accepts_file_under_limit(self):
        validate_file_size(max_mb=1)(SimpleUploadedFile("a.txt", b"x" * 1024))

    def test_rejects_file_over_limit(self):
        upload = SimpleUploadedFile("a.txt", b"x")
        upload.size = 2 * 1024 * 1024

        with pytest.raises(ValidationError) as exc_info:
            validate_file_size(max_mb=1)(upload)

        assert exc_info.value.code == "file_too_large"


class TestValidateContentType:
    def test_exact_match(self):
        validate_content_type(["application/pdf"])(
            SimpleUploadedFile("a.pdf", b"%PDF", content_type="application/pdf")
        )

    def test_family_wildcard(self):
        validate_content_type(["image/*"])(
            SimpleUploadedFile("a.heic", b"img", content_type="image/heic")
        )

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_content_type(["image/*"])(
                SimpleUploadedFile("a.exe", b"MZ", content_type="application/x-msdownload")
            )

        assert exc_info.value.code == "unsupported_file_type"

    def test_rejects_missing_content_type(self):
        upload = SimpleUploadedFile("a.bin", b"x")
        upload.content_type = None

        with pytest.raises(ValidationError):
            validate_content_type(["image/*"])(upload)
