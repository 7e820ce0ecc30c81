"""Sandbox FastAPI application for the Defensoría Universitaria form.

Emula los seis endpoints de DUSevicioWeb con datos de ejemplo para trabajar
el formulario sin depender del servicio remoto. Apuntar ``DU_API_URL`` a
``http://localhost:8000/`` para usarlo desde el frontend.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from pydantic import BaseModel

from defensoria.api.v1.endpoints.du_sandbox import router as du_router
from defensoria.core.logging import configure_logging


class PingResponse(BaseModel):
    """Response model for the ping endpoint.

    Attributes:
        message: Human readable message.
        service: Name of the emulated service.
    """

    message: str
    service: str


configure_logging()

app: FastAPI = FastAPI(title=os.getenv("PROJECT_NAME", "Defensoría Universitaria Sandbox"))

app.include_router(du_router, prefix="/DUSevicioWeb", tags=["DUSevicioWeb"])


@app.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    """Ping endpoint used by the frontend to check the sandbox is up."""

    return PingResponse(message="pong", service="DUSevicioWeb")
