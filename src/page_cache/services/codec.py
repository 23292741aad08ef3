"""Serialization of response envelopes for the response store.

Envelopes are stored as JSON validated through a pydantic model, with
the body base64 encoded so binary content survives. A format marker
lets entries written by other programs, or by an incompatible version
of this one, be told apart and treated as misses.
"""

import base64
import binascii
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from page_cache.entities import ResponseEnvelope
from page_cache.exceptions import EnvelopeDecodeError

ENVELOPE_FORMAT = "dynamic-cache/1"


class _EnvelopeRecord(BaseModel):
    """Wire format of a stored envelope."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: Literal["dynamic-cache/1"]
    status_code: int
    headers: list[tuple[str, str]]
    body: str


def encode(status_code: int, headers: list[tuple[str, str]] | tuple[tuple[str, str], ...], body: bytes) -> bytes:
    record = _EnvelopeRecord(
        format=ENVELOPE_FORMAT,
        status_code=status_code,
        headers=[(name, value) for name, value in headers],
        body=base64.b64encode(body).decode("ascii"),
    )
    return record.model_dump_json().encode("utf-8")


def encode_envelope(envelope: ResponseEnvelope) -> bytes:
    return encode(envelope.status_code, envelope.headers, envelope.body)


def decode_strict(data: bytes) -> ResponseEnvelope:
    """Decode stored bytes, raising EnvelopeDecodeError on anything unreadable."""
    try:
        record = _EnvelopeRecord.model_validate_json(data)
        body = base64.b64decode(record.body, validate=True)
    except (ValidationError, binascii.Error, ValueError) as e:
        raise EnvelopeDecodeError(f"Unreadable cache entry: {e}") from e

    return ResponseEnvelope(
        status_code=record.status_code,
        headers=tuple(record.headers),
        body=body,
    )


def decode(data: bytes | None) -> ResponseEnvelope | None:
    """Decode stored bytes, returning None for absent, truncated or foreign entries."""
    if not data:
        return None
    try:
        return decode_strict(data)
    except EnvelopeDecodeError:
        return None
