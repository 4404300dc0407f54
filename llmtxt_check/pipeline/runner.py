"""
Batch validation runner.

Validates many llm.txt documents with a pool of asyncio workers. Every
input is read before the batch starts, each worker runs the synchronous
pipeline in a thread and keeps its own result list; the lists are only
concatenated after all workers finish, so no result collection is shared.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from llmtxt_check.config import CheckerConfig
from llmtxt_check.schemas import Report
from llmtxt_check.validator import validate

logger = logging.getLogger(__name__)
console = Console(stderr=True)

# (position in the batch, source label, document text)
BatchItem = Tuple[int, str, str]


class BatchValidationRunner:
    """
    Validate documents concurrently with a worker pool.

    Example:
        >>> runner = BatchValidationRunner(num_workers=4)
        >>> reports = runner.validate_batch([("a/llm.txt", text_a), ("b/llm.txt", text_b)])
    """

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        num_workers: int = 4,
        show_progress: bool = False,
    ):
        """
        Initialize the runner.

        Args:
            config: Checker settings shared (read-only) by every worker
            num_workers: Number of parallel workers (default: 4)
            show_progress: Render a rich progress bar on stderr
        """
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")

        self.config = config or CheckerConfig()
        self.num_workers = num_workers
        self.show_progress = show_progress

    async def _worker(
        self,
        worker_id: int,
        queue: asyncio.Queue,
        progress: Optional[Progress] = None,
        task_id=None,
    ) -> List[Tuple[int, Report]]:
        """
        Take documents from the shared queue until it is empty.

        Returns:
            (position, Report) pairs for every document this worker validated
        """
        worker_results = []

        while True:
            try:
                position, source, text = queue.get_nowait()
            except asyncio.QueueEmpty:
                break

            try:
                report = await asyncio.to_thread(validate, text, self.config, source)
                worker_results.append((position, report))
                logger.debug(f"Worker {worker_id}: {source} ok={report.ok}")
            finally:
                queue.task_done()
                if progress is not None:
                    progress.update(task_id, advance=1)

        return worker_results

    async def run(self, inputs: Sequence[Tuple[str, str]]) -> List[Report]:
        """
        Validate every (source, text) pair.

        Returns:
            Reports in the same order as `inputs`
        """
        if not inputs:
            return []

        queue: asyncio.Queue = asyncio.Queue()
        for position, (source, text) in enumerate(inputs):
            queue.put_nowait((position, source, text))

        num_workers = min(self.num_workers, len(inputs))
        logger.info(f"Launching {num_workers} workers to validate {len(inputs)} documents")

        if self.show_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            ) as progress:
                task_id = progress.add_task(f"[cyan]Validating {len(inputs)} documents", total=len(inputs))
                worker_results = await asyncio.gather(*[
                    self._worker(worker_id, queue, progress, task_id)
                    for worker_id in range(num_workers)
                ])
        else:
            worker_results = await asyncio.gather(*[
                self._worker(worker_id, queue)
                for worker_id in range(num_workers)
            ])

        # Flatten per-worker lists, then restore input order
        all_results = [result for worker in worker_results for result in worker]
        all_results.sort(key=lambda item: item[0])
        return [report for _, report in all_results]

    def validate_batch(self, inputs: Sequence[Tuple[str, str]]) -> List[Report]:
        """Synchronous wrapper around `run`."""
        return asyncio.run(self.run(inputs))

    def validate_files(self, paths: Iterable[Path]) -> List[Report]:
        """Read every file up front, then validate them as one batch."""
        inputs = [(str(path), read_document(path)) for path in paths]
        return self.validate_batch(inputs)


def read_document(path: Path) -> str:
    """Read an llm.txt file as UTF-8 (a leading BOM is handled by the parser)."""
    return Path(path).read_text(encoding="utf-8")


def validate_batch(
    inputs: Sequence[Tuple[str, str]],
    config: Optional[CheckerConfig] = None,
    num_workers: int = 4,
) -> List[Report]:
    """
    Convenience function to validate several documents concurrently.

    Args:
        inputs: (source label, text) pairs
        config: Checker settings
        num_workers: Number of parallel workers

    Returns:
        Reports in input order
    """
    return BatchValidationRunner(config=config, num_workers=num_workers).validate_batch(inputs)
