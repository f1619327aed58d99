"""Tests for document persistence and file storage."""

from pathlib import Path

import pytest

from src.documents.exceptions import ProcessingError
from src.documents.models import Document, FieldMapping, PageRequest, ProcessingStatus
from src.documents.repository import InMemoryDocumentRepository
from src.documents.storage import DocumentStorage


def _document(name: str = "a.png", **kwargs) -> Document:
    return Document(
        filename=f"uuid_{name}",
        original_filename=name,
        content_type="image/png",
        file_size=10,
        file_path=f"/tmp/{name}",
        **kwargs,
    )


class TestInMemoryDocumentRepository:
    """Tests for the InMemoryDocumentRepository class."""

    def test_save_assigns_incrementing_ids(self) -> None:
        repo = InMemoryDocumentRepository()
        first = repo.save(_document("a.png"))
        second = repo.save(_document("b.png"))
        assert (first.id, second.id) == (1, 2)

    def test_get_unknown_returns_none(self) -> None:
        assert InMemoryDocumentRepository().get(1) is None

    def test_returned_documents_are_copies(self) -> None:
        repo = InMemoryDocumentRepository()
        saved = repo.save(_document())
        loaded = repo.get(saved.id)
        loaded.status = ProcessingStatus.FAILED
        loaded.field_mappings.append(FieldMapping("Name", "fullName", "string"))

        stored = repo.get(saved.id)
        assert stored.status == ProcessingStatus.PENDING
        assert stored.field_mappings == []

    def test_save_updates_timestamp(self) -> None:
        repo = InMemoryDocumentRepository()
        saved = repo.save(_document())
        saved.progress = 10
        updated = repo.save(saved)
        assert updated.created_at == saved.created_at
        assert updated.updated_at >= saved.updated_at
        assert repo.get(saved.id).progress == 10

    def test_find_by_status(self) -> None:
        repo = InMemoryDocumentRepository()
        repo.save(_document("a.png"))
        done = repo.save(_document("b.png", status=ProcessingStatus.COMPLETED))
        assert [d.id for d in repo.find_by_status(ProcessingStatus.COMPLETED)] == [done.id]

    def test_find_page_sorted_descending(self) -> None:
        repo = InMemoryDocumentRepository()
        for name in ["b.png", "c.png", "a.png"]:
            repo.save(_document(name))

        page = repo.find_page(PageRequest(sort_by="original_filename", descending=True))

        assert [d.original_filename for d in page.items] == ["c.png", "b.png", "a.png"]

    def test_find_page_null_values_last(self) -> None:
        repo = InMemoryDocumentRepository()
        repo.save(_document("a.png"))
        repo.save(_document("b.png", error_message="broken"))

        page = repo.find_page(PageRequest(sort_by="error_message", descending=False))

        assert [d.original_filename for d in page.items] == ["b.png", "a.png"]

    def test_find_page_beyond_end(self) -> None:
        repo = InMemoryDocumentRepository()
        repo.save(_document())
        page = repo.find_page(PageRequest(page=3, size=10))
        assert page.items == []
        assert page.total == 1

    @pytest.mark.parametrize(
        "request_",
        [
            PageRequest(sort_by="field_mappings"),
            PageRequest(sort_by="nope"),
            PageRequest(page=-1),
            PageRequest(size=0),
        ],
    )
    def test_find_page_invalid_request(self, request_: PageRequest) -> None:
        with pytest.raises(ValueError):
            InMemoryDocumentRepository().find_page(request_)

    def test_delete(self) -> None:
        repo = InMemoryDocumentRepository()
        saved = repo.save(_document())
        assert repo.delete(saved.id) is True
        assert repo.get(saved.id) is None
        assert repo.delete(saved.id) is False


class TestDocumentStorage:
    """Tests for the DocumentStorage class."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "uploads"
        DocumentStorage(target)
        assert target.is_dir()

    def test_save_and_read(self, tmp_path: Path) -> None:
        storage = DocumentStorage(tmp_path)
        filename, path = storage.save(b"content", "scan.pdf")
        assert filename.endswith("_scan.pdf")
        assert storage.read(path) == b"content"

    def test_names_are_unique(self, tmp_path: Path) -> None:
        storage = DocumentStorage(tmp_path)
        first, _ = storage.save(b"1", "scan.png")
        second, _ = storage.save(b"2", "scan.png")
        assert first != second

    def test_read_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ProcessingError, match="File not found"):
            DocumentStorage(tmp_path).read(str(tmp_path / "missing.png"))
