"""Parsing for image data URIs (``data:<mime>;base64,<payload>``).

Images reach formai as self-describing data URIs rather than raw bytes so
that the same string can be forwarded to OpenAI-style ``image_url`` blocks
unchanged, or split into ``media_type`` + ``data`` for Anthropic-style
``image`` blocks.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from formai.utils.errors import InvalidInputError

_PREFIX = "data:"
_BASE64_MARKER = ";base64"


@dataclass(frozen=True)
class DataURI:
    """A validated data URI split into its parts."""

    mime_type: str
    payload: str

    @property
    def uri(self) -> str:
        return f"{_PREFIX}{self.mime_type}{_BASE64_MARKER},{self.payload}"


def parse_data_uri(value: str, provider_name: str | None = None) -> DataURI:
    """Validate *value* and return its MIME type and base64 payload.

    Raises
    ------
    InvalidInputError
        If the ``data:`` prefix, the ``;base64`` marker, or a non-empty
        comma-separated payload is missing, or the payload is not valid
        base64.
    """
    if not isinstance(value, str) or not value.startswith(_PREFIX):
        raise InvalidInputError(
            "Image data must be a data URI starting with 'data:'",
            provider_name=provider_name,
        )

    header, sep, payload = value[len(_PREFIX):].partition(",")
    if not sep or not payload.strip():
        raise InvalidInputError(
            "Image data URI is missing its comma-separated payload",
            provider_name=provider_name,
        )
    if not header.endswith(_BASE64_MARKER):
        raise InvalidInputError(
            "Image data URI must be base64-encoded",
            provider_name=provider_name,
        )

    payload = payload.strip()
    try:
        base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidInputError(
            "Image data URI payload is not valid base64",
            provider_name=provider_name,
        ) from exc

    mime_type = header[: -len(_BASE64_MARKER)].strip() or "image/jpeg"
    return DataURI(mime_type=mime_type, payload=payload)
