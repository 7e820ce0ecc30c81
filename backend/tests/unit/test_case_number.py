from __future__ import annotations

from defensoria.core.constants import EP_NUMERO_EXPEDIENTE
from defensoria.schemas.du import CampusDU
from defensoria.services.case_number import CaseNumberResolver, format_local_code
from tests.fixtures.fake_http import CONNECTION_ERROR, FakeResponse, make_client

BRANCH = CampusDU(cPerJuridica="2001", cPerApellido="Trujillo", pS_ESTABID="abc")


def test_server_case_number_is_adopted_verbatim():
    client, session = make_client()
    case = CaseNumberResolver(client).resolve(BRANCH)

    assert case.numeric_id == 345
    assert case.display_code == "DU-TRU-000345"
    assert case.branch_contact_email == "defensoria.tru@example.edu.pe"
    assert case.source == "server"
    assert session.calls[0]["json"] == {"cperjuridica": "2001"}


def test_fallback_is_deterministic_per_branch():
    client, _ = make_client({EP_NUMERO_EXPEDIENTE: {"isSuccess": False, "item": None}})
    resolver = CaseNumberResolver(client)

    first = resolver.resolve(BRANCH)
    second = resolver.resolve(BRANCH)

    assert first.display_code == "EXPE-ABC-0001"
    assert second.display_code == "EXPE-ABC-0002"
    assert (first.numeric_id, second.numeric_id) == (1, 2)
    assert first.branch_contact_email == ""
    assert first.source == "local"


def test_fallback_on_transport_error_and_missing_fields():
    client, _ = make_client({EP_NUMERO_EXPEDIENTE: CONNECTION_ERROR})
    assert CaseNumberResolver(client).resolve(BRANCH).display_code == "EXPE-ABC-0001"

    client, _ = make_client({EP_NUMERO_EXPEDIENTE: FakeResponse({"isSuccess": True, "item": {"nroExpediente": 0, "codigoExpediente": ""}})})
    assert CaseNumberResolver(client).resolve(BRANCH).source == "local"


def test_counters_are_instance_state():
    client, _ = make_client({EP_NUMERO_EXPEDIENTE: {"isSuccess": False}})
    other = CampusDU(cPerJuridica="2002", cPerApellido="Ate", pS_ESTABID="ATE")
    shared: dict[str, int] = {"ATE": 41}

    resolver = CaseNumberResolver(client, counters=shared)
    assert resolver.resolve(other).display_code == "EXPE-ATE-0042"
    assert resolver.resolve(BRANCH).display_code == "EXPE-ABC-0001"
    assert shared == {"ATE": 42, "ABC": 1}

    fresh = CaseNumberResolver(client)
    assert fresh.resolve(BRANCH).display_code == "EXPE-ABC-0001"


def test_format_local_code_pads_to_four_digits():
    assert format_local_code("TRU", 7) == "EXPE-TRU-0007"
    assert format_local_code("TRU", 12345) == "EXPE-TRU-12345"
