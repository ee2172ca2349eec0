"""Rich progress display for composable deploys.

Bridges :class:`~t3rn_contract.core.composable_service.ComposableDeployService`'s
``on_deployed`` callback with a Rich :class:`~rich.progress.Progress`
bar: one step per scheduled component, plus a permanent line for every
component as soon as it is uploaded.

Design
------
* :meth:`__call__` is the callback passed to the service.
* Lines are printed in completion order, which is schedule order.
* Without Rich the lines are still printed, without a bar.
"""

from __future__ import annotations

from typing import Any

from t3rn_contract.cli.console import escape, get_rich_console, out
from t3rn_contract.core.models import CodeHash, DeployTarget
from t3rn_contract.exceptions import EnvironmentError


class DeployProgressReporter:
    """Callable ``on_deployed`` adapter.

    Usage::

        with DeployProgressReporter(total=len(targets)) as reporter:
            service.deploy_all(suri, metadata, on_deployed=reporter)
    """

    def __init__(self, total: int) -> None:
        self._total = total
        self._completed = 0
        self._progress: Any = None
        self._task_id: Any = None
        try:
            from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

            self._progress = Progress(
                TextColumn("[bold blue]Deploying components"),
                BarColumn(),
                MofNCompleteColumn(),
                console=get_rich_console(stderr=False),
                transient=True,
            )
        except (ModuleNotFoundError, EnvironmentError):
            self._progress = None

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> DeployProgressReporter:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the progress display."""
        if self._progress is not None and self._task_id is None:
            self._progress.start()
            self._task_id = self._progress.add_task("deploy", total=self._total)

    def stop(self) -> None:
        """Stop the progress display (idempotent)."""
        if self._progress is not None and self._task_id is not None:
            self._progress.stop()
            self._task_id = None

    @property
    def completed(self) -> int:
        return self._completed

    # ------------------------------------------------------------------
    # Callback
    # ------------------------------------------------------------------

    def __call__(self, target: DeployTarget, code_hash: CodeHash) -> None:
        self._completed += 1
        line = (
            f"[bold blue]{escape(target.compose)}[/bold blue] - "
            f"[blue]successfully deployed byte code with hash:[/blue] {code_hash}"
        )
        if self._progress is not None and self._task_id is not None:
            self._progress.console.print(line)
            self._progress.advance(self._task_id)
        else:
            out.print(line)
