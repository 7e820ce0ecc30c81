from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from defensoria.core.constants import (
    AREAS_PREVIAS,
    MSG_ENVIO_EN_CURSO,
    MSG_ENVIO_ERROR,
    MSG_ENVIO_OK,
    MSG_FORMULARIO_INVALIDO,
    MSG_SIN_EXPEDIENTE,
    TIPO_ADMINISTRATIVO,
)
from defensoria.schemas.du import ApiFailure, CampusDU, CaseRecord, RegistroExpedienteDU
from defensoria.services.attachments import AttachmentManager
from defensoria.services.du_client import DefensoriaClient, extract_error_message
from defensoria.services.form_rules import (
    FormState,
    apply_otra_area,
    mark_all_touched,
    validate_form,
)

logger = logging.getLogger(__name__)

SubmissionStatus = Literal["ok", "invalid", "missing_case", "failed", "busy"]


@dataclass
class SubmissionResult:
    status: SubmissionStatus
    message: str
    state: FormState | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)
    response: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def area_codes(state: FormState) -> list[int]:
    return sorted(AREAS_PREVIAS[key] for key in state.selected_areas())


def _int_or_none(value: Any) -> int | None:
    text = "" if value is None else str(value).strip()
    return int(text) if text.lstrip("-").isdigit() else None


def _text(state: FormState, name: str) -> str:
    value = state.value(name)
    return "" if value is None else str(value).strip()


def build_registro_payload(state: FormState, case: CaseRecord, branch: CampusDU) -> RegistroExpedienteDU:
    administrative = _text(state, "tipoUsuario") == TIPO_ADMINISTRATIVO
    apoderado = bool(state.value("existeApoderado"))
    return RegistroExpedienteDU(
        idExpediente=case.numeric_id,
        codigoExpediente=case.display_code,
        tipoUsuario=int(_text(state, "tipoUsuario")),
        cPerJuridica=branch.legal_entity_code,
        cPerApellido=branch.display_name,
        correoFilial=case.branch_contact_email or branch.correo or "",
        nombres=_text(state, "nombres"),
        apellidos=_text(state, "apellidos"),
        dni=_text(state, "dni"),
        nUniOrgCodigo=None if administrative else _int_or_none(state.value("escuelaProfesional")),
        nModalidad=None if administrative else _int_or_none(state.value("modalidad")),
        domicilio=_text(state, "domicilio"),
        telefono=_text(state, "telefono"),
        correo=_text(state, "correo"),
        existeApo=apoderado,
        apellidosApo=_text(state, "apellidosApo") if apoderado else "",
        nombresApo=_text(state, "nombresApo") if apoderado else "",
        correoApo=_text(state, "correoApo") if apoderado else "",
        idDepartamento=_int_or_none(state.value("area")) if administrative else None,
        opciones=",".join(str(code) for code in area_codes(state)),
        textoOtros=_text(state, "textoOtros"),
        descripcion=_text(state, "expone"),
        solicita=_text(state, "solicita"),
    )


class SubmissionOrchestrator:
    def __init__(self, client: DefensoriaClient) -> None:
        self.client = client
        self.submitting = False

    def submit(
        self,
        state: FormState,
        case: CaseRecord | None,
        branch: CampusDU | None,
        attachments: AttachmentManager,
    ) -> SubmissionResult:
        if self.submitting:
            return SubmissionResult(status="busy", message=MSG_ENVIO_EN_CURSO, state=state)

        state = apply_otra_area(state)
        errors = validate_form(state)
        if branch is None:
            errors.setdefault("filial", []).append("required")
        if errors:
            logger.info("submission_invalid fields=%s", ",".join(sorted(errors)))
            return SubmissionResult(
                status="invalid",
                message=MSG_FORMULARIO_INVALIDO,
                state=mark_all_touched(state),
                errors=errors,
            )

        if case is None or not case.is_complete():
            logger.warning("submission_missing_case cperjuridica=%s", branch.legal_entity_code)
            return SubmissionResult(status="missing_case", message=MSG_SIN_EXPEDIENTE, state=state)

        registro = build_registro_payload(state, case, branch)
        self.submitting = True
        try:
            logger.info(
                "submission_start code=%s cperjuridica=%s files=%s",
                case.display_code,
                branch.legal_entity_code,
                len(attachments),
            )
            result = self.client.registrar_expediente(registro, attachments.uploads())
        finally:
            self.submitting = False

        if isinstance(result, ApiFailure):
            logger.error("submission_failed code=%s reason=%s", case.display_code, result.reason)
            return SubmissionResult(
                status="failed",
                message=extract_error_message(result.payload, MSG_ENVIO_ERROR),
                state=state,
                response=result,
            )

        logger.info("submission_done code=%s", case.display_code)
        return SubmissionResult(status="ok", message=MSG_ENVIO_OK, state=state, response=result.item)
