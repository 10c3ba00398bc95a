"""
Reusable upload validators for model fields and DRF serializers.

Usage:
    from core.validators import validate_file_size, validate_content_type

    attachment = models.FileField(validators=[validate_file_size(max_mb=10)])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from django.core.files import File


def validate_file_size(max_mb: int = 10):
    """
    Validator factory for file size limits.

    Args:
        max_mb: Maximum file size in megabytes

    Returns:
        Validator function raising django ValidationError when exceeded
    """

    def validator(file: File):
        max_bytes = max_mb * 1024 * 1024
        if file.size > max_bytes:
            raise ValidationError(
                f"File size must be less than {max_mb}MB. "
                f"Current size: {file.size / 1024 / 1024:.1f}MB",
                code="file_too_large",
            )

    return validator


def validate_content_type(allowed: Iterable[str]):
    """
    Validator factory restricting uploads to a set of MIME types.

    Entries ending in "/*" match a whole family (e.g. "image/*").
    Files without a declared content type are rejected.
    """
    allowed = tuple(allowed)

    def validator(file: File):
        content_type = getattr(file, "content_type", None) or ""
        for pattern in allowed:
            if pattern.endswith("/*") and content_type.startswith(pattern[:-1]):
                return
            if content_type == pattern:
                return
        raise ValidationError(
            f"Unsupported file type: {content_type or 'unknown'}",
            code="unsupported_file_type",
        )

    return validator
