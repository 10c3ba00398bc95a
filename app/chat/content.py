"""
Message content variants.

A message is exactly one of:
    TextContent: plain text body
    ImageContent: uploaded image with optional caption
    FileContent: any other uploaded document with optional caption

Message.content builds the variant from the stored row, so callers branch
on the type instead of probing optional columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class TextContent:
    body: str


@dataclass(frozen=True)
class ImageContent:
    url: str
    name: str
    size: int | None
    caption: str = ""


@dataclass(frozen=True)
class FileContent:
    url: str
    name: str
    size: int | None
    caption: str = ""


MessageContent = Union[TextContent, ImageContent, FileContent]


def message_type_for_mime(content_type: str | None) -> str:
    """
    Derive the message type from an upload's MIME type.

    image/* -> "image", any other MIME -> "file", no upload -> "text".
    """
    if not content_type:
        return "text"
    if content_type.startswith("image/"):
        return "image"
    return "file"
