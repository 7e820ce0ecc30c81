from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from defensoria.core import config
from defensoria.core.constants import EXTENSIONES_PERMITIDAS

logger = logging.getLogger(__name__)

REASON_SIN_NOMBRE = "sin_nombre"
REASON_DUPLICADO = "duplicado"
REASON_LIMITE = "limite_archivos"
REASON_TAMANO = "tamano_excedido"
REASON_EXTENSION = "extension_no_permitida"


def file_extension(name: str) -> str:
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def _read_bytes(raw: Any) -> bytes | None:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    getvalue = getattr(raw, "getvalue", None)
    if callable(getvalue):
        return getvalue()
    return None


class PreviewRegistry:
    """Registro de vistas previas vivas.

    Cada archivo aceptado recibe un handle; liberar un handle desconocido o ya
    liberado no hace nada y devuelve False.
    """

    def __init__(self) -> None:
        self._previews: dict[str, bytes | None] = {}

    def allocate(self, raw: Any) -> str:
        handle = f"preview-{uuid.uuid4().hex}"
        self._previews[handle] = _read_bytes(raw)
        return handle

    def release(self, handle: str) -> bool:
        if handle not in self._previews:
            logger.warning("preview_release_unknown handle=%s", handle)
            return False
        del self._previews[handle]
        return True

    def get(self, handle: str) -> bytes | None:
        return self._previews.get(handle)

    @property
    def live(self) -> int:
        return len(self._previews)


@dataclass
class Attachment:
    file_name: str
    byte_size: int
    preview_handle: str
    raw: Any
    mime_type: str | None = None

    def as_upload(self) -> tuple[str, Any, str | None]:
        content = _read_bytes(self.raw)
        return (self.file_name, content if content is not None else self.raw, self.mime_type)


@dataclass
class AttachmentDecision:
    file_name: str
    accepted: bool
    reason: str | None = None


class AttachmentManager:
    def __init__(
        self,
        previews: PreviewRegistry | None = None,
        *,
        max_files: int | None = None,
        max_bytes: int | None = None,
        allowed_extensions: Iterable[str] | None = None,
    ) -> None:
        self.previews = previews if previews is not None else PreviewRegistry()
        self.max_files = max_files if max_files is not None else config.DU_MAX_FILES
        self.max_bytes = max_bytes if max_bytes is not None else config.DU_MAX_FILE_BYTES
        self.allowed_extensions = frozenset(
            e.lower().lstrip(".") for e in (allowed_extensions or EXTENSIONES_PERMITIDAS)
        )
        self.items: list[Attachment] = []

    def _rejection(self, name: str, size: int) -> str | None:
        if not name.strip():
            return REASON_SIN_NOMBRE
        if any(a.file_name == name and a.byte_size == size for a in self.items):
            return REASON_DUPLICADO
        if len(self.items) >= self.max_files:
            return REASON_LIMITE
        if size > self.max_bytes:
            return REASON_TAMANO
        if file_extension(name) not in self.allowed_extensions:
            return REASON_EXTENSION
        return None

    def add(self, files: Iterable[Any]) -> list[AttachmentDecision]:
        decisions = []
        for raw in files or []:
            name = str(getattr(raw, "name", "") or "")
            size = int(getattr(raw, "size", 0) or 0)
            reason = self._rejection(name, size)
            if reason:
                logger.info("attachment_rejected name=%s size=%s reason=%s", name, size, reason)
                decisions.append(AttachmentDecision(file_name=name, accepted=False, reason=reason))
                continue
            mime = getattr(raw, "type", None) or mimetypes.guess_type(name)[0]
            handle = self.previews.allocate(raw)
            self.items.append(
                Attachment(file_name=name, byte_size=size, preview_handle=handle, raw=raw, mime_type=mime)
            )
            logger.info("attachment_accepted name=%s size=%s", name, size)
            decisions.append(AttachmentDecision(file_name=name, accepted=True))
        return decisions

    def remove(self, index: int) -> Attachment:
        if index < 0 or index >= len(self.items):
            raise IndexError(f"No attachment at position {index}")
        attachment = self.items.pop(index)
        self.previews.release(attachment.preview_handle)
        return attachment

    def clear(self) -> None:
        while self.items:
            attachment = self.items.pop()
            self.previews.release(attachment.preview_handle)

    def uploads(self) -> list[tuple[str, Any, str | None]]:
        return [a.as_upload() for a in self.items]

    @property
    def total_bytes(self) -> int:
        return sum(a.byte_size for a in self.items)

    def __len__(self) -> int:
        return len(self.items)
