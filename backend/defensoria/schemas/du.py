"""Pydantic schemas for the DUSevicioWeb contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class _DUModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CampusDU(_DUModel):
    legal_entity_code: str = Field(alias="cPerJuridica")
    display_name: str = Field(default="", alias="cPerApellido")
    establishment_id: str = Field(default="", alias="pS_ESTABID")
    correo: str | None = Field(default=None, alias="cCorreo")

    @field_validator("legal_entity_code", "establishment_id", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("display_name", mode="before")
    @classmethod
    def _name_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class UnidadAcademicaDU(_DUModel):
    code: str = Field(alias="nuniorgcodigo")
    label: str = Field(default="", alias="cuniorgnombre")
    campus_name: str | None = Field(default=None, alias="cPerApellido")
    tipo_plan: int | None = Field(default=None, alias="nTipoPlan")

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, value: Any) -> str:
        return str(value)


class DepartamentoDU(_DUModel):
    code: str = Field(validation_alias=AliasChoices("idDepartamento", "nDepCodigo", "code"))
    label: str = Field(
        default="",
        validation_alias=AliasChoices("cDepartamento", "cDescripcion", "label"),
    )

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, value: Any) -> str:
        return str(value)


class ModalidadDU(_DUModel):
    code: str = Field(alias="nIntCodigo")
    label: str = Field(default="", alias="cIntDescripcion")
    clase: int | None = Field(default=None, alias="nIntClase")
    tipo: int | None = Field(default=None, alias="nIntTipo")

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, value: Any) -> str:
        return str(value)


class ExpedienteDU(_DUModel):
    nro_expediente: int = Field(alias="nroExpediente")
    codigo_expediente: str = Field(alias="codigoExpediente")
    correo_expediente: str | None = Field(default=None, alias="correoExpediente")


class CatalogOption(BaseModel):
    code: str
    label: str


class CaseRecord(BaseModel):
    numeric_id: int
    display_code: str
    branch_contact_email: str = ""
    source: str = "server"

    def is_complete(self) -> bool:
        return bool(self.numeric_id) and bool(self.display_code.strip())


class RegistroExpedienteDU(BaseModel):
    """Canonical multipart contract of RegistrarExpedienteDU.

    Field names follow the service declaration; files travel apart under
    ``Archivos``.
    """

    idExpediente: int
    codigoExpediente: str
    tipoUsuario: int
    cPerJuridica: str
    cPerApellido: str
    correoFilial: str = ""
    nombres: str
    apellidos: str
    dni: str
    nUniOrgCodigo: int | None = None
    nModalidad: int | None = None
    domicilio: str
    telefono: str
    correo: str
    existeApo: bool = False
    apellidosApo: str = ""
    nombresApo: str = ""
    correoApo: str = ""
    idDepartamento: int | None = None
    opciones: str
    textoOtros: str = ""
    descripcion: str
    solicita: str

    def to_form_data(self) -> dict[str, str]:
        data: dict[str, str] = {}
        for key, value in self.model_dump().items():
            if value is None:
                data[key] = ""
            elif isinstance(value, bool):
                data[key] = "true" if value else "false"
            else:
                data[key] = str(value)
        return data


# ---------------------------------------------------------------------------
# Resultado de cada llamada: éxito con item/lista, o fallo con motivo.
# ---------------------------------------------------------------------------
@dataclass
class ApiSuccess(Generic[T]):
    item: T | None = None
    items: list[T] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)

    ok = True


@dataclass
class ApiFailure:
    reason: str
    status_code: int | None = None
    payload: Any = None

    ok = False


ApiResult = ApiSuccess | ApiFailure
