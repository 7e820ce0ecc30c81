from __future__ import annotations

import logging
import threading
import unicodedata
from typing import Any, Callable

from defensoria.core.constants import MSG_FILIALES_ERROR, MSG_FILIALES_VACIAS
from defensoria.schemas.du import ApiFailure, ApiResult, CampusDU, CatalogOption
from defensoria.services.du_client import DefensoriaClient

logger = logging.getLogger(__name__)


def spanish_sort_key(text: str) -> str:
    """Clave de orden sin tildes ni mayúsculas (equivale a locale "es", sensitivity base).

    La ñ es letra propia del alfabeto y va después de la n, así que se marca
    antes de quitar los diacríticos.
    """
    s = unicodedata.normalize("NFC", text or "").casefold().replace("ñ", "n\uffff")
    s = unicodedata.normalize("NFKD", s)
    s = "".join(c for c in s if not unicodedata.combining(c))
    return s.casefold().strip()


def sort_by_label(items: list[Any], label: Callable[[Any], str]) -> list[Any]:
    visible = [i for i in items if (label(i) or "").strip()]
    return sorted(visible, key=lambda i: spanish_sort_key(label(i)))


class BranchDirectory:
    """Listado de filiales para el selector de la cabecera."""

    def __init__(self, client: DefensoriaClient) -> None:
        self.client = client
        self.branches: list[CampusDU] = []
        self.is_loading = False
        self.has_error = False
        self.error_message = ""

    def load(self) -> list[CampusDU]:
        self.is_loading = True
        self.has_error = False
        self.error_message = ""
        result = self.client.campus()
        if isinstance(result, ApiFailure):
            logger.error("filiales_load_failed reason=%s", result.reason)
            transport = result.status_code is None or result.status_code >= 400
            self._fail(MSG_FILIALES_ERROR if transport else MSG_FILIALES_VACIAS)
            return []
        if not result.items:
            self._fail(MSG_FILIALES_VACIAS)
            return []
        self.branches = sort_by_label(result.items, lambda b: b.display_name)
        self.is_loading = False
        logger.info("filiales_loaded count=%s", len(self.branches))
        return list(self.branches)

    def _fail(self, message: str) -> None:
        self.branches = []
        self.is_loading = False
        self.has_error = True
        self.error_message = message

    @property
    def options(self) -> list[dict[str, Any]]:
        return [{"label": b.display_name, "value": b} for b in self.branches]

    def find(self, legal_entity_code: str | None) -> CampusDU | None:
        if not legal_entity_code:
            return None
        return next((b for b in self.branches if b.legal_entity_code == legal_entity_code), None)


class ReferenceLoader:
    """Catálogo dependiente (unidades académicas, departamentos, modalidades).

    ``begin`` devuelve un ticket de generación; ``complete`` solo escribe si el
    ticket sigue vigente, así una respuesta lenta de una filial anterior no
    pisa la lista de la filial actual.
    """

    def __init__(self, name: str, fetch: Callable[..., ApiResult]) -> None:
        self.name = name
        self._fetch = fetch
        self._lock = threading.Lock()
        self.generation = 0
        self.loading = False
        self.options: list[CatalogOption] = []
        self.error: str | None = None

    def begin(self) -> int:
        with self._lock:
            self.generation += 1
            self.options = []
            self.error = None
            self.loading = True
            return self.generation

    def fetch(self, scope_key: str | None = None) -> ApiResult:
        if scope_key is None:
            return self._fetch()
        return self._fetch(scope_key)

    def complete(self, ticket: int, result: ApiResult) -> bool:
        with self._lock:
            if ticket != self.generation:
                logger.info("catalog_stale_discarded name=%s ticket=%s current=%s", self.name, ticket, self.generation)
                return False
            self.loading = False
            if isinstance(result, ApiFailure):
                logger.warning("catalog_load_failed name=%s reason=%s", self.name, result.reason)
                self.options = []
                self.error = result.reason
                return True
            items = sort_by_label(result.items, lambda i: i.label)
            self.options = [CatalogOption(code=i.code, label=i.label) for i in items]
            logger.info("catalog_loaded name=%s count=%s", self.name, len(self.options))
            return True

    def load(self, scope_key: str | None = None) -> list[CatalogOption]:
        ticket = self.begin()
        self.complete(ticket, self.fetch(scope_key))
        return list(self.options)

    def reset(self) -> None:
        """Vacía la lista e invalida cualquier carga en curso."""
        with self._lock:
            self.generation += 1
            self.options = []
            self.error = None
            self.loading = False

    def label_for(self, code: str | None) -> str:
        return next((o.label for o in self.options if o.code == code), "")
