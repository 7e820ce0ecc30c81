from __future__ import annotations

from dataclasses import dataclass

import pytest

from defensoria.services.attachments import (
    REASON_DUPLICADO,
    REASON_EXTENSION,
    REASON_LIMITE,
    REASON_SIN_NOMBRE,
    REASON_TAMANO,
    AttachmentManager,
    PreviewRegistry,
    file_extension,
    format_file_size,
)


@dataclass
class FakeUpload:
    name: str
    size: int
    type: str | None = None

    def getvalue(self) -> bytes:
        return b"x" * min(self.size, 16)


class CountingRegistry(PreviewRegistry):
    def __init__(self) -> None:
        super().__init__()
        self.released: list[str] = []

    def release(self, handle: str) -> bool:
        self.released.append(handle)
        return super().release(handle)


def _manager(registry=None) -> AttachmentManager:
    return AttachmentManager(registry or CountingRegistry(), max_files=3, max_bytes=10_485_760)


def test_oversized_file_is_rejected():
    manager = _manager()
    decisions = manager.add([FakeUpload("a.pdf", 11_000_000)])
    assert decisions[0].accepted is False
    assert decisions[0].reason == REASON_TAMANO
    assert manager.items == []


def test_validation_order_and_reasons():
    manager = _manager()
    manager.add([FakeUpload("informe.pdf", 100)])
    decisions = manager.add(
        [
            FakeUpload("", 10),
            FakeUpload("informe.pdf", 100),
            FakeUpload("script.exe", 10),
            FakeUpload("informe.pdf", 200),
        ]
    )
    assert [d.reason for d in decisions] == [REASON_SIN_NOMBRE, REASON_DUPLICADO, REASON_EXTENSION, None]
    assert len(manager) == 2


def test_max_count_is_never_exceeded():
    manager = _manager()
    files = [FakeUpload(f"foto{i}.JPG", 1000 + i) for i in range(6)]
    decisions = manager.add(files)
    assert len(manager) == 3
    assert [d.accepted for d in decisions] == [True, True, True, False, False, False]
    assert {d.reason for d in decisions[3:]} == {REASON_LIMITE}


def test_duplicate_is_detected_before_count_limit():
    manager = _manager()
    manager.add([FakeUpload("a.pdf", 1), FakeUpload("b.pdf", 1), FakeUpload("c.pdf", 1)])
    decision = manager.add([FakeUpload("a.pdf", 1)])[0]
    assert decision.reason == REASON_DUPLICADO


def test_no_two_accepted_entries_share_name_and_size():
    manager = _manager()
    manager.add([FakeUpload("a.pdf", 5), FakeUpload("a.pdf", 5), FakeUpload("a.pdf", 6)])
    keys = [(a.file_name, a.byte_size) for a in manager.items]
    assert len(keys) == len(set(keys)) == 2


def test_remove_releases_preview_once():
    registry = CountingRegistry()
    manager = _manager(registry)
    manager.add([FakeUpload("a.pdf", 5), FakeUpload("b.png", 6, "image/png")])
    handle = manager.items[0].preview_handle

    removed = manager.remove(0)
    assert removed.file_name == "a.pdf"
    assert registry.released == [handle]
    assert registry.live == 1

    with pytest.raises(IndexError):
        manager.remove(5)


def test_clear_releases_every_preview_exactly_once():
    registry = CountingRegistry()
    manager = _manager(registry)
    manager.add([FakeUpload("a.pdf", 5), FakeUpload("b.mp3", 6), FakeUpload("c.mp4", 7)])
    handles = {a.preview_handle for a in manager.items}

    manager.clear()
    manager.clear()

    assert sorted(registry.released) == sorted(handles)
    assert registry.live == 0
    assert manager.items == []


def test_preview_registry_keeps_bytes_until_release():
    registry = PreviewRegistry()
    handle = registry.allocate(FakeUpload("a.png", 4))
    assert registry.get(handle) == b"xxxx"
    assert registry.release(handle) is True
    assert registry.release(handle) is False
    assert registry.get(handle) is None


def test_uploads_and_mime_guess():
    manager = _manager()
    manager.add([FakeUpload("Acta.PDF", 3)])
    name, content, mime = manager.uploads()[0]
    assert name == "Acta.PDF"
    assert content == b"xxx"
    assert mime == "application/pdf"


def test_helpers():
    assert file_extension("archivo.final.DOCX") == "docx"
    assert file_extension("sin_extension") == ""
    assert format_file_size(512) == "512 B"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(10_485_760) == "10.00 MB"
