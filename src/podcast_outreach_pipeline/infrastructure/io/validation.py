"""Pydantic-based validation helpers for inbound search API payloads."""

from __future__ import annotations

from typing import TypedDict

from pydantic import TypeAdapter, ValidationError


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


class ListenNotesPodcastInput(TypedDict, total=False):
    id: str | None
    title_original: str | None
    description_original: str | None
    rss: str | None
    listen_score: float | None
    language: str | None


class ListenNotesSearchInput(TypedDict, total=False):
    results: list[ListenNotesPodcastInput] | None


def validate_json_as[SchemaT](schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def parse_listennotes_results(payload: str | bytes) -> list[ListenNotesPodcastInput]:
    """Validate a ListenNotes search body and return its result entries."""
    response = validate_json_as(ListenNotesSearchInput, payload)
    return list(response.get("results") or [])
