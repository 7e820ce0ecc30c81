"""Configuración leída del entorno para el cliente de la Defensoría Universitaria."""

from __future__ import annotations

import os


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "si"}


def _base_url() -> str:
    url = os.getenv(
        "DU_API_URL",
        "https://ucvapi.azure-api.net/defensoriauniversitaria/api/",
    )
    return url if url.endswith("/") else f"{url}/"


DU_API_URL: str = _base_url()

DU_HTTP_TIMEOUT: float = float(os.getenv("DU_HTTP_TIMEOUT", "10"))
DU_HTTP_RETRIES: int = int(os.getenv("DU_HTTP_RETRIES", "3"))
DU_REGISTER_TIMEOUT: float = float(os.getenv("DU_REGISTER_TIMEOUT", "60"))

DU_MAX_FILES: int = int(os.getenv("DU_MAX_FILES", "3"))
DU_MAX_FILE_BYTES: int = int(os.getenv("DU_MAX_FILE_BYTES", str(10 * 1024 * 1024)))

# Sandbox: fuerza isSuccess=false en NumeroExpedienteDU para probar el respaldo local.
DU_SANDBOX_FAIL_CASE_NUMBER: bool = _env_bool("DU_SANDBOX_FAIL_CASE_NUMBER")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
