"""Tests for batch processing with per-document isolation."""

from collections.abc import Iterator

import pytest

from src.documents.batch import BatchCoordinator
from src.documents.models import ProcessingStatus
from src.documents.orchestrator import DocumentProcessingService


@pytest.fixture
def coordinator(service: DocumentProcessingService) -> Iterator[BatchCoordinator]:
    batch = BatchCoordinator(service, max_workers=1)
    yield batch
    batch.shutdown()


class TestBatchCoordinator:
    """Tests for the BatchCoordinator class."""

    def test_one_corrupt_document_does_not_affect_others(
        self,
        service: DocumentProcessingService,
        coordinator: BatchCoordinator,
        png_bytes: bytes,
    ) -> None:
        good = [
            service.upload_document(png_bytes, f"form{i}.png", "image/png").id
            for i in range(4)
        ]
        bad = service.upload_document(b"corrupt bytes", "bad.png", "image/png").id
        ids = [good[0], good[1], bad, good[2], good[3]]

        results = coordinator.process_batch(ids).result(timeout=60)

        assert [r.document_id for r in results] == ids
        statuses = [r.status for r in results]
        assert statuses.count(ProcessingStatus.COMPLETED) == 4
        assert statuses[2] == ProcessingStatus.FAILED
        assert "Could not decode image" in results[2].error_message
        for document_id in good:
            assert service.get_document(document_id).status == ProcessingStatus.COMPLETED

    def test_unknown_id_is_reported_per_item(
        self,
        service: DocumentProcessingService,
        coordinator: BatchCoordinator,
        png_bytes: bytes,
    ) -> None:
        known = service.upload_document(png_bytes, "form.png", "image/png").id

        results = coordinator.run_batch([known, 404])

        assert results[0].status == ProcessingStatus.COMPLETED
        assert results[0].succeeded is True
        assert results[1].status is None
        assert results[1].error_message == "Document not found: 404"
        assert results[1].succeeded is False

    def test_busy_document_is_reported_per_item(
        self,
        service: DocumentProcessingService,
        coordinator: BatchCoordinator,
        png_bytes: bytes,
    ) -> None:
        document = service.upload_document(png_bytes, "form.png", "image/png")
        document.status = ProcessingStatus.PROCESSING
        service.repository.save(document)

        results = coordinator.run_batch([document.id])

        assert results[0].status is None
        assert "already being processed" in results[0].error_message

    def test_empty_batch(self, coordinator: BatchCoordinator) -> None:
        assert coordinator.process_batch([]).result(timeout=10) == []
