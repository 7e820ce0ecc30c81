"""HTTP client for the DUSevicioWeb endpoints.

Every public method returns an ``ApiSuccess`` or an ``ApiFailure``; transport
errors and ``isSuccess`` false are folded into the same failure shape so the
callers never see a ``requests`` exception.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable

import requests
from pydantic import BaseModel, ValidationError

from defensoria.core import config
from defensoria.core.constants import (
    EP_CAMPUS,
    EP_DEPARTAMENTOS,
    EP_MODALIDADES,
    EP_NUMERO_EXPEDIENTE,
    EP_REGISTRAR_EXPEDIENTE,
    EP_UNIDADES_ACADEMICAS,
)
from defensoria.schemas.du import (
    ApiFailure,
    ApiResult,
    ApiSuccess,
    CampusDU,
    DepartamentoDU,
    ExpedienteDU,
    ModalidadDU,
    RegistroExpedienteDU,
    UnidadAcademicaDU,
)

logger = logging.getLogger(__name__)

FileTuple = tuple[str, Any, str | None]


def safe_request(method, url, session=None, **kwargs):
    kwargs.setdefault("timeout", config.DU_HTTP_TIMEOUT)
    retries = kwargs.pop("retries", config.DU_HTTP_RETRIES)
    http = session or requests
    delay = 1.0
    for attempt in range(1, retries + 1):
        try:
            if method == "GET":
                return http.get(url, **kwargs)
            if method == "POST":
                return http.post(url, **kwargs)
        except requests.exceptions.ConnectionError:
            if attempt == retries:
                return None
            time.sleep(delay)
            delay *= 2
        except requests.exceptions.ReadTimeout:
            return None
        except requests.exceptions.RequestException as exc:
            logger.warning("du_request_error url=%s error=%s", url, exc)
            return None
    return None


def extract_error_message(payload: Any, fallback: str) -> str:
    """Best human readable message inside an error payload."""
    if isinstance(payload, str):
        return payload.strip() or fallback
    if not isinstance(payload, dict):
        return fallback
    for key in ("mensaje", "message", "detail", "error", "title"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        # FastAPI/Pydantic devuelve lista de errores en "detail"
        if isinstance(value, list):
            msgs = [str(v.get("msg", "")) for v in value if isinstance(v, dict) and v.get("msg")]
            if msgs:
                return "; ".join(msgs)
    errors = payload.get("errors")
    if isinstance(errors, dict):
        msgs = []
        for value in errors.values():
            if isinstance(value, list):
                msgs.extend(str(v) for v in value)
            else:
                msgs.append(str(value))
        if msgs:
            return "; ".join(msgs)
    if isinstance(errors, list) and errors:
        return "; ".join(str(e) for e in errors)
    item = payload.get("item")
    if isinstance(item, dict):
        return extract_error_message(item, fallback)
    return fallback


class DefensoriaClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        retries: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        url = base_url or config.DU_API_URL
        self.base_url = url if url.endswith("/") else f"{url}/"
        self.timeout = timeout if timeout is not None else config.DU_HTTP_TIMEOUT
        self.retries = retries if retries is not None else config.DU_HTTP_RETRIES
        self.session = session

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def _call(self, method: str, endpoint: str, **kwargs) -> tuple[dict[str, Any] | None, ApiFailure | None]:
        kwargs.setdefault("timeout", self.timeout)
        kwargs.setdefault("retries", self.retries)
        res = safe_request(method, self._url(endpoint), session=self.session, **kwargs)
        if res is None:
            logger.warning("du_request_failed endpoint=%s reason=transport", endpoint)
            return None, ApiFailure(reason="Error de conexión con el servicio")

        try:
            body = res.json()
        except ValueError:
            body = None

        if res.status_code >= 400:
            message = extract_error_message(body if body is not None else res.text, f"HTTP {res.status_code}")
            logger.warning(
                "du_request_failed endpoint=%s status=%s reason=%s", endpoint, res.status_code, message
            )
            return None, ApiFailure(reason=message, status_code=res.status_code, payload=body)

        if not isinstance(body, dict):
            logger.warning("du_request_failed endpoint=%s status=%s reason=invalid_json", endpoint, res.status_code)
            return None, ApiFailure(reason="Respuesta inválida del servicio", status_code=res.status_code)

        if body.get("isSuccess") is not True:
            message = extract_error_message(body, "El servicio no pudo atender la solicitud")
            logger.info("du_soft_failure endpoint=%s reason=%s", endpoint, message)
            return None, ApiFailure(reason=message, status_code=res.status_code, payload=body)

        return body, None

    def _list(self, method: str, endpoint: str, model: type[BaseModel], **kwargs) -> ApiResult:
        body, failure = self._call(method, endpoint, **kwargs)
        if failure:
            return failure
        raw_items = body.get("lstItem")
        if not isinstance(raw_items, list):
            logger.info("du_soft_failure endpoint=%s reason=missing_lstItem", endpoint)
            return ApiFailure(reason="La respuesta no contiene elementos", payload=body)
        items = []
        for raw in raw_items:
            try:
                items.append(model.model_validate(raw))
            except ValidationError as exc:
                logger.warning("du_item_skipped endpoint=%s error=%s", endpoint, exc.error_count())
        return ApiSuccess(items=items, payload=body)

    def _item(self, method: str, endpoint: str, model: type[BaseModel], **kwargs) -> ApiResult:
        body, failure = self._call(method, endpoint, **kwargs)
        if failure:
            return failure
        raw = body.get("item")
        if not isinstance(raw, dict):
            logger.info("du_soft_failure endpoint=%s reason=missing_item", endpoint)
            return ApiFailure(reason="La respuesta no contiene el elemento esperado", payload=body)
        try:
            return ApiSuccess(item=model.model_validate(raw), payload=body)
        except ValidationError as exc:
            logger.warning("du_item_invalid endpoint=%s error=%s", endpoint, exc.error_count())
            return ApiFailure(reason="Elemento con formato inválido", payload=body)

    def campus(self) -> ApiResult:
        return self._list("GET", EP_CAMPUS, CampusDU)

    def numero_expediente(self, cperjuridica: str) -> ApiResult:
        return self._item("POST", EP_NUMERO_EXPEDIENTE, ExpedienteDU, json={"cperjuridica": cperjuridica})

    def departamentos(self, estabid: str) -> ApiResult:
        return self._list("POST", EP_DEPARTAMENTOS, DepartamentoDU, json={"estabid": estabid})

    def modalidades(self) -> ApiResult:
        return self._list("GET", EP_MODALIDADES, ModalidadDU)

    def unidades_academicas(self, cperjuridica: str) -> ApiResult:
        return self._list(
            "POST", EP_UNIDADES_ACADEMICAS, UnidadAcademicaDU, json={"cperjuridica": cperjuridica}
        )

    def registrar_expediente(
        self,
        registro: RegistroExpedienteDU,
        files: Iterable[FileTuple] = (),
    ) -> ApiResult:
        multipart = [("Archivos", f) for f in files]
        body, failure = self._call(
            "POST",
            EP_REGISTRAR_EXPEDIENTE,
            data=registro.to_form_data(),
            files=multipart or None,
            timeout=config.DU_REGISTER_TIMEOUT,
            # Un reintento podría duplicar el expediente.
            retries=1,
        )
        if failure:
            return failure
        return ApiSuccess(item=body.get("item"), payload=body)


