"""Sesión de registro de un expediente.

Une el selector de filiales, los catálogos dependientes, el número de
expediente, las reglas del formulario, los adjuntos y el envío. Al cambiar de
filial las dos cargas dependientes y el número de expediente se piden en
paralelo; cada resultado se aplica en el hilo que llamó y solo si pertenece a
la selección vigente.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Iterable

from defensoria.schemas.du import CampusDU, CaseRecord
from defensoria.services.attachments import AttachmentDecision, AttachmentManager, PreviewRegistry
from defensoria.services.case_number import CaseNumberResolver
from defensoria.services.catalogs import BranchDirectory, ReferenceLoader
from defensoria.services.du_client import DefensoriaClient
from defensoria.services.form_rules import (
    FormState,
    apply_change,
    initial_form_state,
    reset_fields,
)
from defensoria.services.submission import SubmissionOrchestrator, SubmissionResult

logger = logging.getLogger(__name__)

BRANCH_SCOPED_FIELDS = ("escuelaProfesional", "area")


class IntakeSession:
    def __init__(
        self,
        client: DefensoriaClient | None = None,
        *,
        resolver: CaseNumberResolver | None = None,
        attachments: AttachmentManager | None = None,
    ) -> None:
        self.client = client or DefensoriaClient()
        self.directory = BranchDirectory(self.client)
        self.unidades = ReferenceLoader("unidades_academicas", self.client.unidades_academicas)
        self.departamentos = ReferenceLoader("departamentos", self.client.departamentos)
        self.modalidades = ReferenceLoader("modalidades", self.client.modalidades)
        self.resolver = resolver if resolver is not None else CaseNumberResolver(self.client)
        self.attachments = attachments if attachments is not None else AttachmentManager(PreviewRegistry())
        self.orchestrator = SubmissionOrchestrator(self.client)

        self.form: FormState = initial_form_state()
        self.branch: CampusDU | None = None
        self.case: CaseRecord | None = None
        self.case_loading = False
        self.selection_generation = 0
        self.last_message = ""
        self.last_errors: dict[str, list[str]] = {}

    def start(self) -> None:
        self.directory.load()
        self.modalidades.load()

    @property
    def submitting(self) -> bool:
        return self.orchestrator.submitting

    # ------------------------------------------------------------------
    # Filial
    # ------------------------------------------------------------------
    def select_branch(self, branch: CampusDU | str | None) -> None:
        if isinstance(branch, str):
            branch = self.directory.find(branch)

        self.form = reset_fields(self.form, BRANCH_SCOPED_FIELDS)
        self.unidades.reset()
        self.departamentos.reset()
        self.selection_generation += 1
        generation = self.selection_generation
        self.branch = branch
        self.case = None
        self.last_errors.pop("filial", None)

        if branch is None:
            self.case_loading = False
            return

        logger.info(
            "branch_selected cperjuridica=%s estabid=%s generation=%s",
            branch.legal_entity_code,
            branch.establishment_id,
            generation,
        )
        unidades_ticket = self.unidades.begin()
        departamentos_ticket = self.departamentos.begin()
        self.case_loading = True

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="du") as pool:
            futures: dict[Future, tuple[str, Any]] = {
                pool.submit(self.unidades.fetch, branch.legal_entity_code): ("unidades", unidades_ticket),
                pool.submit(self.departamentos.fetch, branch.establishment_id): (
                    "departamentos",
                    departamentos_ticket,
                ),
                pool.submit(self.resolver.resolve, branch): ("expediente", generation),
            }
            for future in as_completed(futures):
                kind, ticket = futures[future]
                result = future.result()
                if kind == "unidades":
                    self.unidades.complete(ticket, result)
                elif kind == "departamentos":
                    self.departamentos.complete(ticket, result)
                else:
                    self._apply_case(ticket, result)

    def _apply_case(self, generation: int, case: CaseRecord) -> None:
        # Las cargas se resuelven dentro de select_branch; el descarte cubre
        # llamadas concurrentes a select_branch desde otro hilo.
        if generation != self.selection_generation:
            logger.info("case_number_stale_discarded code=%s", case.display_code)
            return
        self.case = case
        self.case_loading = False

    # ------------------------------------------------------------------
    # Campos y adjuntos
    # ------------------------------------------------------------------
    def set_field(self, name: str, value: Any) -> FormState:
        self.form = apply_change(self.form, name, value)
        return self.form

    def add_files(self, files: Iterable[Any]) -> list[AttachmentDecision]:
        return self.attachments.add(files)

    def remove_file(self, index: int) -> None:
        self.attachments.remove(index)

    # ------------------------------------------------------------------
    # Limpieza y envío
    # ------------------------------------------------------------------
    def limpiar_formulario(self) -> None:
        self.form = initial_form_state()
        self.attachments.clear()
        self.select_branch(None)
        logger.info("form_reset")

    def enviar_formulario(self) -> SubmissionResult:
        result = self.orchestrator.submit(self.form, self.case, self.branch, self.attachments)
        self.last_message = result.message
        self.last_errors = dict(result.errors)
        if result.ok:
            self.limpiar_formulario()
        elif result.state is not None:
            self.form = result.state
        return result
