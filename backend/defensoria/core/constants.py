"""Constantes del formulario de la Defensoría Universitaria.

Agrupa los códigos que el servicio DUSevicioWeb espera (tipos de usuario,
áreas consultadas previamente), los patrones de validación del formulario y
los mensajes mostrados al usuario.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Endpoints del servicio DUSevicioWeb (relativos a DU_API_URL)
# ---------------------------------------------------------------------------
EP_CAMPUS: Final[str] = "DUSevicioWeb/CampusDU"
EP_NUMERO_EXPEDIENTE: Final[str] = "DUSevicioWeb/NumeroExpedienteDU"
EP_DEPARTAMENTOS: Final[str] = "DUSevicioWeb/DepartamentosDU"
EP_MODALIDADES: Final[str] = "DUSevicioWeb/ModalidadesDU"
EP_UNIDADES_ACADEMICAS: Final[str] = "DUSevicioWeb/UnidadesAcademicasDU"
EP_REGISTRAR_EXPEDIENTE: Final[str] = "DUSevicioWeb/RegistrarExpedienteDU"

# ---------------------------------------------------------------------------
# Tipos de usuario. Solo el personal administrativo usa el área/servicio;
# el resto declara escuela profesional y modalidad.
# ---------------------------------------------------------------------------
TIPO_DOCENTE: Final[str] = "12"
TIPO_ESTUDIANTE: Final[str] = "13"
TIPO_EGRESADO: Final[str] = "14"
TIPO_ADMINISTRATIVO: Final[str] = "21"
TIPO_OTRO: Final[str] = "99"

TIPOS_USUARIO: Final[dict[str, str]] = {
    TIPO_ESTUDIANTE: "Estudiante",
    TIPO_DOCENTE: "Docente",
    TIPO_ADMINISTRATIVO: "Administrativo",
    TIPO_EGRESADO: "Egresado",
    TIPO_OTRO: "Otro",
}

# ---------------------------------------------------------------------------
# Áreas contactadas previamente (grupo otraArea). El orden es el de la
# pantalla; el código es el que viaja en "opciones".
# ---------------------------------------------------------------------------
AREA_OTRO: Final[str] = "otro"

AREAS_PREVIAS: Final[dict[str, int]] = {
    "direccionEscuela": 1,
    "secretariaAcademica": 2,
    "bienestarUniversitario": 3,
    "tesoreria": 4,
    "registrosAcademicos": 5,
    "biblioteca": 6,
    AREA_OTRO: 7,
}

AREAS_PREVIAS_LABELS: Final[dict[str, str]] = {
    "direccionEscuela": "Dirección de Escuela",
    "secretariaAcademica": "Secretaría Académica",
    "bienestarUniversitario": "Bienestar Universitario",
    "tesoreria": "Tesorería",
    "registrosAcademicos": "Registros Académicos",
    "biblioteca": "Biblioteca",
    AREA_OTRO: "Otro",
}

# ---------------------------------------------------------------------------
# Validaciones
# ---------------------------------------------------------------------------
"""DNI de 8 dígitos o pasaporte / carné de extranjería alfanumérico."""
DOCUMENTO_PATTERN: Final[str] = r"^(\d{8}|[A-Za-z0-9\-]{6,20})$"

"""Teléfono celular peruano: 9 dígitos."""
TELEFONO_PATTERN: Final[str] = r"^\d{9}$"

EMAIL_PATTERN: Final[str] = r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"

MIN_EXPONE: Final[int] = 50
MIN_SOLICITA: Final[int] = 20
MIN_TEXTO_OTROS: Final[int] = 3

# ---------------------------------------------------------------------------
# Adjuntos
# ---------------------------------------------------------------------------
EXTENSIONES_DOCUMENTO: Final[frozenset[str]] = frozenset(
    {"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt"}
)
EXTENSIONES_IMAGEN: Final[frozenset[str]] = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
EXTENSIONES_AUDIO: Final[frozenset[str]] = frozenset({"mp3", "wav", "ogg", "m4a"})
EXTENSIONES_VIDEO: Final[frozenset[str]] = frozenset({"mp4", "avi", "mov", "mkv", "webm"})

EXTENSIONES_PERMITIDAS: Final[frozenset[str]] = (
    EXTENSIONES_DOCUMENTO | EXTENSIONES_IMAGEN | EXTENSIONES_AUDIO | EXTENSIONES_VIDEO
)

# ---------------------------------------------------------------------------
# Expediente local (respaldo cuando NumeroExpedienteDU no responde)
# ---------------------------------------------------------------------------
PREFIJO_EXPEDIENTE_LOCAL: Final[str] = "EXPE"
DIGITOS_EXPEDIENTE_LOCAL: Final[int] = 4

# ---------------------------------------------------------------------------
# Mensajes
# ---------------------------------------------------------------------------
MSG_FILIALES_VACIAS: Final[str] = "No se encontraron filiales en la respuesta"
MSG_FILIALES_ERROR: Final[str] = "Error de conexión al cargar las filiales"
MSG_FORMULARIO_INVALIDO: Final[str] = "Por favor, complete todos los campos requeridos."
MSG_SIN_EXPEDIENTE: Final[str] = (
    "No se ha generado el número de expediente. Seleccione nuevamente la filial."
)
MSG_ENVIO_OK: Final[str] = "Formulario enviado correctamente"
MSG_ENVIO_ERROR: Final[str] = "Ocurrió un error al registrar el expediente. Intente nuevamente."
MSG_ENVIO_EN_CURSO: Final[str] = "El expediente se está enviando, espere un momento."
