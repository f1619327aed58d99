"""Batch processing with per-document failure isolation."""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from src.utils.logger import get_logger

from .exceptions import PipelineError
from .models import ProcessingStatus
from .orchestrator import DocumentProcessingService

logger = get_logger(__name__)


@dataclass
class BatchItemResult:
    """Outcome of one document in a batch run."""

    document_id: int
    status: ProcessingStatus | None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ProcessingStatus.COMPLETED


class BatchCoordinator:
    """Runs many documents through the pipeline independently.

    Waiting for a batch happens on the coordinator's own executor, so it
    never occupies the worker threads that process the documents.

    Args:
        service: Document processing service that runs each document.
        max_workers: Number of batches that can be awaited concurrently.
    """

    def __init__(self, service: DocumentProcessingService, max_workers: int = 2) -> None:
        self.service = service
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="batch-coordinator"
        )

    def process_batch(self, document_ids: list[int]) -> Future:
        """Process documents in the background.

        Args:
            document_ids: Ids of the documents to process.

        Returns:
            Future resolving to one :class:`BatchItemResult` per id, in
            input order.
        """
        logger.info("Starting batch processing for %d documents", len(document_ids))
        return self._executor.submit(self.run_batch, list(document_ids))

    def run_batch(self, document_ids: list[int]) -> list[BatchItemResult]:
        """Process documents and wait until every one is finished.

        Unknown or busy ids and failed runs are reported per item; no
        exception escapes for an individual document.

        Args:
            document_ids: Ids of the documents to process.

        Returns:
            One result per id, in input order.
        """
        pending: list[tuple[int, Future | None, str | None]] = []
        for document_id in document_ids:
            try:
                pending.append((document_id, self.service.start_processing(document_id), None))
            except PipelineError as exc:
                logger.warning("Skipping document %d in batch: %s", document_id, exc)
                pending.append((document_id, None, str(exc)))

        results: list[BatchItemResult] = []
        for document_id, future, error in pending:
            if future is None:
                results.append(BatchItemResult(document_id, None, error))
                continue
            try:
                document = future.result()
            except Exception as exc:
                logger.error("Batch run for document %d failed: %s", document_id, exc)
                results.append(BatchItemResult(document_id, ProcessingStatus.FAILED, str(exc)))
                continue
            results.append(
                BatchItemResult(document_id, document.status, document.error_message)
            )

        completed = sum(1 for r in results if r.succeeded)
        logger.info(
            "Batch processing completed: %d/%d documents succeeded",
            completed,
            len(results),
        )
        return results

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
