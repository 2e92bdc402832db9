"""Progress reporting for paginated requests.

Reporters only observe a pagination sequence: they receive one ``update``
after each completed page and exactly one ``finish`` when the sequence stops,
whether it completed, failed or was cancelled. Use one reporter per sequence.

The rich-based reporter needs the ``progress`` extra::

    pip install vila[progress]

Example:
    ```python
    from vila.progress import RichProgressReporter

    async for page in client.send_paginated(request, progress=RichProgressReporter("Passengers")):
        ...
    ```
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ProgressReporter(Protocol):
    def update(self, position: int, total: int | None) -> None: ...

    def finish(self, position: int, total: int | None, *, completed: bool) -> None: ...


class RichProgressReporter:
    """Render pagination progress with a ``rich`` progress bar.

    The bar is indeterminate until the request reports a page total.
    """

    def __init__(self, description: str = "Fetching pages", *, console: Any = None, transient: bool = False):
        from rich.progress import (
            BarColumn,
            MofNCompleteColumn,
            Progress,
            SpinnerColumn,
            TextColumn,
            TimeElapsedColumn,
        )

        self.description = description
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=transient,
        )
        self._task_id = None

    def _ensure_task(self, total: int | None):
        if self._task_id is None:
            self._progress.start()
            self._task_id = self._progress.add_task(self.description, total=total)
        return self._task_id

    def update(self, position: int, total: int | None) -> None:
        task_id = self._ensure_task(total)
        self._progress.update(task_id, completed=position, total=total)

    def finish(self, position: int, total: int | None, *, completed: bool) -> None:
        task_id = self._ensure_task(total)
        if completed:
            # The last page is known now even if the API never reported a total
            total = position
        self._progress.update(task_id, completed=position, total=total)
        self._progress.stop()
