"""Sandbox endpoints that mimic DUSevicioWeb for local development."""

from __future__ import annotations

import itertools
import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from defensoria.core import config
from defensoria.schemas.du import RegistroExpedienteDU

logger = logging.getLogger(__name__)

router = APIRouter()

CAMPUS = [
    {"cPerJuridica": "1000000001", "cPerApellido": "Trujillo", "pS_ESTABID": "TRU", "cCorreo": "defensoria.tru@example.edu.pe"},
    {"cPerJuridica": "1000000002", "cPerApellido": "Lima Norte", "pS_ESTABID": "LNO", "cCorreo": "defensoria.lno@example.edu.pe"},
    {"cPerJuridica": "1000000003", "cPerApellido": "Chiclayo", "pS_ESTABID": "CHI", "cCorreo": "defensoria.chi@example.edu.pe"},
    {"cPerJuridica": "1000000004", "cPerApellido": "Ate", "pS_ESTABID": "ATE", "cCorreo": "defensoria.ate@example.edu.pe"},
    {"cPerJuridica": "1000000005", "cPerApellido": "", "pS_ESTABID": "XXX"},
]

UNIDADES = {
    "1000000001": [
        {"nuniorgcodigo": "101", "cuniorgnombre": "Ingeniería de Sistemas", "cPerApellido": "Trujillo", "nTipoPlan": 1},
        {"nuniorgcodigo": "102", "cuniorgnombre": "Derecho", "cPerApellido": "Trujillo", "nTipoPlan": 1},
        {"nuniorgcodigo": "103", "cuniorgnombre": "Administración", "cPerApellido": "Trujillo", "nTipoPlan": 1},
    ],
    "1000000002": [
        {"nuniorgcodigo": "201", "cuniorgnombre": "Psicología", "cPerApellido": "Lima Norte", "nTipoPlan": 1},
        {"nuniorgcodigo": "202", "cuniorgnombre": "Educación Inicial", "cPerApellido": "Lima Norte", "nTipoPlan": 1},
    ],
}

DEPARTAMENTOS = {
    "TRU": [
        {"idDepartamento": 11, "cDepartamento": "Tesorería"},
        {"idDepartamento": 12, "cDepartamento": "Biblioteca Central"},
        {"idDepartamento": 13, "cDepartamento": "Bienestar Universitario"},
    ],
    "LNO": [
        {"idDepartamento": 21, "cDepartamento": "Registros Académicos"},
        {"idDepartamento": 22, "cDepartamento": "Soporte TI"},
    ],
}

MODALIDADES = [
    {"nIntCodigo": 1, "nIntClase": 5001, "cIntDescripcion": "PRESENCIAL", "nIntTipo": 1},
    {"nIntCodigo": 2, "nIntClase": 5001, "cIntDescripcion": "SEMIPRESENCIAL", "nIntTipo": 1},
    {"nIntCodigo": 3, "nIntClase": 5001, "cIntDescripcion": "A DISTANCIA", "nIntTipo": 1},
]

_case_counter = itertools.count(1)
_register_counter = itertools.count(1)


class CperJuridicaBody(BaseModel):
    cperjuridica: str


class EstabIdBody(BaseModel):
    estabid: str


def _campus(cperjuridica: str) -> dict | None:
    return next((c for c in CAMPUS if c["cPerJuridica"] == cperjuridica), None)


@router.get("/CampusDU")
def campus_du() -> dict:
    return {"isSuccess": True, "lstItem": CAMPUS}


@router.post("/NumeroExpedienteDU")
def numero_expediente_du(body: CperJuridicaBody) -> dict:
    campus = _campus(body.cperjuridica)
    if campus is None or config.DU_SANDBOX_FAIL_CASE_NUMBER:
        return {"isSuccess": False, "item": None, "mensaje": "No se pudo generar el número de expediente"}
    nro = next(_case_counter)
    return {
        "isSuccess": True,
        "item": {
            "nroExpediente": nro,
            "codigoExpediente": f"DU-{campus['pS_ESTABID']}-{nro:06d}",
            "correoExpediente": campus.get("cCorreo", ""),
        },
    }


@router.post("/DepartamentosDU")
def departamentos_du(body: EstabIdBody) -> dict:
    return {"isSuccess": True, "lstItem": DEPARTAMENTOS.get(body.estabid.upper(), [])}


@router.get("/ModalidadesDU")
def modalidades_du() -> dict:
    return {"isSuccess": True, "lstItem": MODALIDADES}


@router.post("/UnidadesAcademicasDU")
def unidades_academicas_du(body: CperJuridicaBody) -> dict:
    return {"isSuccess": True, "lstItem": UNIDADES.get(body.cperjuridica, [])}


@router.post("/RegistrarExpedienteDU")
async def registrar_expediente_du(request: Request) -> dict:
    form = await request.form()
    fields = {k: v for k, v in form.items() if not isinstance(v, UploadFile)}
    files = [f for f in form.getlist("Archivos") if isinstance(f, UploadFile)]
    try:
        registro = RegistroExpedienteDU.model_validate(
            {k: (None if v == "" and k in {"nUniOrgCodigo", "nModalidad", "idDepartamento"} else v) for k, v in fields.items()}
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=[{"msg": f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}"} for e in exc.errors()],
        ) from exc

    if _campus(registro.cPerJuridica) is None:
        return {"isSuccess": False, "mensaje": "La filial indicada no existe"}

    names = []
    for upload in files:
        try:
            await upload.read()
            names.append(upload.filename)
        finally:
            await upload.close()

    id_registro = next(_register_counter)
    logger.info(
        "sandbox_registered code=%s files=%s opciones=%s",
        registro.codigoExpediente,
        len(names),
        registro.opciones,
    )
    return {
        "isSuccess": True,
        "item": {
            "mensaje": "Expediente registrado correctamente",
            "idRegistro": id_registro,
            "numeroExpediente": registro.codigoExpediente,
            "archivos": names,
        },
    }
