"""Feed-fetch progress bar for the rank command."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import override

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .protocols import ProgressReporter


def build_feed_progress() -> Progress:
    # stderr, so table and JSON output on stdout stay clean
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
    )


@dataclass
class CliProgressReporter(ProgressReporter):
    """Shows one bar per fetch pass; the fallback pass is labelled with its number."""

    make_progress: Callable[[], Progress] = build_feed_progress
    _progress: Progress | None = None
    _task_id: TaskID | None = None
    _passes: int = 0

    @override
    def start(self, label: str, total: int | None) -> None:
        self._passes += 1
        description = label if self._passes == 1 else f"{label} (pass {self._passes})"
        if self._progress is None:
            self._progress = self.make_progress()
            self._progress.start()
        if self._task_id is None:
            self._task_id = self._progress.add_task(description, total=total)
        else:
            self._progress.reset(self._task_id, total=total, description=description)

    @override
    def advance(self, count: int) -> None:
        if self._progress is None or self._task_id is None:
            return
        self._progress.advance(self._task_id, count)

    @override
    def finish(self) -> None:
        if self._progress is None:
            return
        if self._task_id is not None:
            self._progress.remove_task(self._task_id)
        self._progress.stop()
        self._progress = None
        self._task_id = None
