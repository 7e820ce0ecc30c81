from __future__ import annotations

from defensoria.core.constants import (
    EP_REGISTRAR_EXPEDIENTE,
    MSG_ENVIO_ERROR,
    MSG_ENVIO_EN_CURSO,
    MSG_ENVIO_OK,
    MSG_SIN_EXPEDIENTE,
    TIPO_ADMINISTRATIVO,
    TIPO_ESTUDIANTE,
)
from defensoria.schemas.du import CampusDU, CaseRecord
from defensoria.services.attachments import AttachmentManager, PreviewRegistry
from defensoria.services.form_rules import apply_change, initial_form_state, set_area
from defensoria.services.submission import (
    SubmissionOrchestrator,
    area_codes,
    build_registro_payload,
)
from tests.fixtures.du_responses import REGISTRO_ERROR_RESPONSE, VALID_FORM_VALUES
from tests.fixtures.fake_http import CONNECTION_ERROR, FakeResponse, make_client

BRANCH = CampusDU(cPerJuridica="2001", cPerApellido="Trujillo", pS_ESTABID="TRU", cCorreo="filial@example.edu.pe")
CASE = CaseRecord(numeric_id=345, display_code="DU-TRU-000345", branch_contact_email="du.tru@example.edu.pe")


def _state(tipo: str = TIPO_ESTUDIANTE):
    state = initial_form_state()
    for name, value in VALID_FORM_VALUES.items():
        state = apply_change(state, name, value)
    state = apply_change(state, "tipoUsuario", tipo)
    if tipo == TIPO_ADMINISTRATIVO:
        state = apply_change(state, "area", "11")
    else:
        state = apply_change(state, "escuelaProfesional", "101")
        state = apply_change(state, "modalidad", "1")
    state = set_area(state, "tesoreria", True)
    state = set_area(state, "otro", True)
    return apply_change(state, "textoOtros", "Decanato")


def _attachments() -> AttachmentManager:
    return AttachmentManager(PreviewRegistry(), max_files=3, max_bytes=10_485_760)


def test_invalid_form_sends_nothing_and_marks_touched():
    client, session = make_client()
    orchestrator = SubmissionOrchestrator(client)
    state = apply_change(_state(), "correo", "")

    result = orchestrator.submit(state, CASE, BRANCH, _attachments())

    assert result.status == "invalid"
    assert result.errors == {"correo": ["required"]}
    assert all(f.touched for f in result.state.fields.values())
    assert session.calls == []


def test_missing_branch_is_reported():
    client, session = make_client()
    result = SubmissionOrchestrator(client).submit(_state(), CASE, None, _attachments())
    assert result.status == "invalid"
    assert result.errors == {"filial": ["required"]}
    assert session.calls == []


def test_missing_case_number_blocks_submission():
    client, session = make_client()
    orchestrator = SubmissionOrchestrator(client)

    result = orchestrator.submit(_state(), None, BRANCH, _attachments())
    assert result.status == "missing_case"
    assert result.message == MSG_SIN_EXPEDIENTE

    blank = CaseRecord(numeric_id=0, display_code="")
    assert orchestrator.submit(_state(), blank, BRANCH, _attachments()).status == "missing_case"
    assert session.calls == []


def test_payload_for_academic_user():
    registro = build_registro_payload(_state(), CASE, BRANCH)
    assert registro.idExpediente == 345
    assert registro.codigoExpediente == "DU-TRU-000345"
    assert registro.tipoUsuario == 13
    assert registro.correoFilial == "du.tru@example.edu.pe"
    assert registro.nUniOrgCodigo == 101
    assert registro.nModalidad == 1
    assert registro.idDepartamento is None
    assert registro.opciones == "4,7"
    assert registro.textoOtros == "Decanato"
    assert registro.descripcion == VALID_FORM_VALUES["expone"]
    assert registro.existeApo is False
    assert registro.correoApo == ""


def test_payload_for_administrative_user_with_apoderado():
    state = _state(TIPO_ADMINISTRATIVO)
    state = apply_change(state, "existeApoderado", True)
    state = apply_change(state, "apellidosApo", "Rojas")
    state = apply_change(state, "nombresApo", "Luis")
    state = apply_change(state, "correoApo", "luis@example.com")

    registro = build_registro_payload(state, CASE, BRANCH)
    assert registro.idDepartamento == 11
    assert registro.nUniOrgCodigo is None
    assert registro.nModalidad is None
    assert registro.existeApo is True
    assert (registro.apellidosApo, registro.nombresApo, registro.correoApo) == ("Rojas", "Luis", "luis@example.com")


def test_branch_email_used_when_case_has_none():
    case = CaseRecord(numeric_id=1, display_code="EXPE-TRU-0001", source="local")
    assert build_registro_payload(_state(), case, BRANCH).correoFilial == "filial@example.edu.pe"


def test_area_codes_are_sorted():
    state = set_area(set_area(initial_form_state(), "biblioteca", True), "direccionEscuela", True)
    assert area_codes(state) == [1, 6]


def test_successful_submission():
    client, session = make_client()
    orchestrator = SubmissionOrchestrator(client)
    result = orchestrator.submit(_state(), CASE, BRANCH, _attachments())

    assert result.ok
    assert result.message == MSG_ENVIO_OK
    assert result.response["numeroExpediente"] == "DU-TRU-000345"
    assert session.endpoints() == [EP_REGISTRAR_EXPEDIENTE]
    assert orchestrator.submitting is False


def test_failure_message_comes_from_server():
    client, _ = make_client({EP_REGISTRAR_EXPEDIENTE: REGISTRO_ERROR_RESPONSE})
    result = SubmissionOrchestrator(client).submit(_state(), CASE, BRANCH, _attachments())
    assert result.status == "failed"
    assert result.message == "El DNI ingresado no es válido"
    assert result.state is not None


def test_failure_without_message_uses_generic_text():
    client, _ = make_client({EP_REGISTRAR_EXPEDIENTE: CONNECTION_ERROR})
    orchestrator = SubmissionOrchestrator(client)
    result = orchestrator.submit(_state(), CASE, BRANCH, _attachments())
    assert result.message == MSG_ENVIO_ERROR
    assert orchestrator.submitting is False

    client, _ = make_client({EP_REGISTRAR_EXPEDIENTE: FakeResponse(None, status_code=500, text="")})
    assert SubmissionOrchestrator(client).submit(_state(), CASE, BRANCH, _attachments()).message == MSG_ENVIO_ERROR


def test_second_submit_while_busy_is_rejected():
    client, session = make_client()
    orchestrator = SubmissionOrchestrator(client)
    orchestrator.submitting = True

    result = orchestrator.submit(_state(), CASE, BRANCH, _attachments())
    assert result.status == "busy"
    assert result.message == MSG_ENVIO_EN_CURSO
    assert session.calls == []
