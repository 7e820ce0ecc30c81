from __future__ import annotations

import logging
import threading

from defensoria.core.constants import DIGITOS_EXPEDIENTE_LOCAL, PREFIJO_EXPEDIENTE_LOCAL
from defensoria.schemas.du import ApiFailure, CampusDU, CaseRecord
from defensoria.services.du_client import DefensoriaClient

logger = logging.getLogger(__name__)


def format_local_code(estabid: str, counter: int) -> str:
    return f"{PREFIJO_EXPEDIENTE_LOCAL}-{estabid}-{counter:0{DIGITOS_EXPEDIENTE_LOCAL}d}"


class CaseNumberResolver:
    """Obtiene el número de expediente de la filial.

    Si NumeroExpedienteDU falla se genera uno local con un contador por
    establecimiento. El contador vive mientras viva la instancia: no se
    persiste y se reinicia con el proceso, por lo que dos sesiones pueden
    repetir códigos.
    """

    def __init__(self, client: DefensoriaClient, counters: dict[str, int] | None = None) -> None:
        self.client = client
        self.counters: dict[str, int] = counters if counters is not None else {}
        self._lock = threading.Lock()

    def resolve(self, branch: CampusDU) -> CaseRecord:
        result = self.client.numero_expediente(branch.legal_entity_code)
        if not isinstance(result, ApiFailure) and result.item is not None:
            exp = result.item
            if exp.nro_expediente and exp.codigo_expediente:
                logger.info(
                    "case_number_resolved cperjuridica=%s code=%s",
                    branch.legal_entity_code,
                    exp.codigo_expediente,
                )
                return CaseRecord(
                    numeric_id=exp.nro_expediente,
                    display_code=exp.codigo_expediente,
                    branch_contact_email=exp.correo_expediente or "",
                    source="server",
                )
        return self.next_local(branch)

    def next_local(self, branch: CampusDU) -> CaseRecord:
        estabid = (branch.establishment_id or "").upper()
        with self._lock:
            counter = self.counters.get(estabid, 0) + 1
            self.counters[estabid] = counter
        code = format_local_code(estabid, counter)
        logger.warning("case_number_fallback estabid=%s code=%s", estabid, code)
        return CaseRecord(numeric_id=counter, display_code=code, branch_contact_email="", source="local")
