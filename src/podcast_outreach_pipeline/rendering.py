"""Terminal table and JSON envelope output for ranked targets."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from datetime import datetime
from typing import Any

from rich.console import Console
from rich.table import Table

from .domain.models import RankedTarget

JSON_SCHEMA_VERSION = "1.0"
EMPTY_RESULTS_MESSAGE = "No ranked targets found."
SHOW_COLUMN_WIDTH = 29
CONTACT_COLUMN_WIDTH = 26

_NUMERIC_COLUMNS = ("Score", "Reach", "Frequency", "NicheFit", "Activity")


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 3] + "..."


def format_score(value: float) -> str:
    return f"{value:.3f}"


def format_newest(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else "-"


def build_results_table(targets: Sequence[RankedTarget]) -> Table:
    """Build the ranked-target table; rank numbers start at 1."""
    table = Table(show_lines=False, header_style="bold")
    table.add_column("Rank", justify="right", no_wrap=True)
    table.add_column("Show", no_wrap=True, max_width=SHOW_COLUMN_WIDTH)
    table.add_column("Lang", no_wrap=True)
    for name in _NUMERIC_COLUMNS:
        table.add_column(name, justify="right", no_wrap=True)
    table.add_column("Priority", no_wrap=True)
    table.add_column("NewestEp", no_wrap=True)
    table.add_column("Contact", no_wrap=True, max_width=CONTACT_COLUMN_WIDTH)

    for rank, target in enumerate(targets, start=1):
        table.add_row(
            str(rank),
            truncate(target.show_name, SHOW_COLUMN_WIDTH),
            target.detected_language,
            format_score(target.score),
            format_score(target.reach),
            format_score(target.frequency),
            format_score(target.niche_fit),
            format_score(target.activity_score),
            target.outreach_priority,
            format_newest(target.newest_episode_published_at),
            truncate(target.contact_email or "-", CONTACT_COLUMN_WIDTH),
        )
    return table


def render_results(targets: Sequence[RankedTarget], console: Console) -> None:
    if not targets:
        console.print(EMPTY_RESULTS_MESSAGE)
        return
    console.print(build_results_table(targets))


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def target_to_dict(target: RankedTarget) -> dict[str, Any]:
    return asdict(target)


def build_json_envelope(
    *,
    generated_at: datetime,
    arguments: Mapping[str, object],
    results: Sequence[RankedTarget],
    warnings: Sequence[str],
) -> dict[str, Any]:
    """Build the machine-readable output document."""
    return {
        "schema_version": JSON_SCHEMA_VERSION,
        "generated_at_utc": generated_at.isoformat(),
        "arguments": dict(arguments),
        "total": len(results),
        "results": [target_to_dict(target) for target in results],
        "warnings": list(warnings),
    }


def dumps_envelope(envelope: Mapping[str, Any], *, pretty: bool = False) -> str:
    return json.dumps(
        envelope,
        ensure_ascii=False,
        indent=2 if pretty else None,
        default=_json_default,
    )
