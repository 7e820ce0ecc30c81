from __future__ import annotations


CAMPUS_RESPONSE = {
    "isSuccess": True,
    "lstItem": [
        {"cPerJuridica": "2001", "cPerApellido": "trujillo", "pS_ESTABID": "tru"},
        {"cPerJuridica": "2002", "cPerApellido": "Áncash", "pS_ESTABID": "anc"},
        {"cPerJuridica": "2003", "cPerApellido": "   ", "pS_ESTABID": "vac"},
        {"cPerJuridica": "2004", "cPerApellido": "Lima Este", "pS_ESTABID": "lce"},
        {"cPerJuridica": "2005", "cPerApellido": "Chiclayo", "pS_ESTABID": "chi"},
        {"cPerJuridica": "2006", "cPerApellido": None, "pS_ESTABID": "nul"},
        {"cPerJuridica": "2007", "cPerApellido": "Ate", "pS_ESTABID": "ate"},
    ],
}

EXPEDIENTE_RESPONSE = {
    "isSuccess": True,
    "item": {
        "nroExpediente": 345,
        "codigoExpediente": "DU-TRU-000345",
        "correoExpediente": "defensoria.tru@example.edu.pe",
    },
}

UNIDADES_RESPONSE = {
    "isSuccess": True,
    "lstItem": [
        {"nuniorgcodigo": "102", "cuniorgnombre": "Derecho", "cPerApellido": "Trujillo", "nTipoPlan": 1},
        {"nuniorgcodigo": "101", "cuniorgnombre": "administración", "cPerApellido": "Trujillo", "nTipoPlan": 1},
        {"nuniorgcodigo": "109", "cuniorgnombre": "", "cPerApellido": "Trujillo", "nTipoPlan": 1},
        {"nuniorgcodigo": "103", "cuniorgnombre": "Educación", "cPerApellido": "Trujillo", "nTipoPlan": 1},
    ],
}

DEPARTAMENTOS_RESPONSE = {
    "isSuccess": True,
    "lstItem": [
        {"idDepartamento": 12, "cDepartamento": "Tesorería"},
        {"idDepartamento": 11, "cDepartamento": "Biblioteca Central"},
    ],
}

MODALIDADES_RESPONSE = {
    "isSuccess": True,
    "lstItem": [
        {"nIntCodigo": 2, "nIntClase": 5001, "cIntDescripcion": "SEMIPRESENCIAL", "nIntTipo": 1},
        {"nIntCodigo": 1, "nIntClase": 5001, "cIntDescripcion": "PRESENCIAL", "nIntTipo": 1},
        {"nIntCodigo": 3, "nIntClase": 5001, "cIntDescripcion": "A DISTANCIA", "nIntTipo": 1},
    ],
}

SOFT_FAILURE_RESPONSE = {"isSuccess": False, "lstItem": None, "mensaje": "Sin datos"}

REGISTRO_OK_RESPONSE = {
    "isSuccess": True,
    "item": {"mensaje": "Expediente registrado", "idRegistro": 9, "numeroExpediente": "DU-TRU-000345"},
}

REGISTRO_ERROR_RESPONSE = {"isSuccess": False, "mensaje": "El DNI ingresado no es válido"}

VALID_FORM_VALUES = {
    "nombres": "María",
    "apellidos": "Quispe Huamán",
    "dni": "45678912",
    "domicilio": "Av. América Sur 3145",
    "telefono": "987654321",
    "correo": "maria.quispe@example.com",
    "expone": "Solicité la rectificación de mi nota del curso de Estadística y no obtuve respuesta.",
    "solicita": "Que se revise y rectifique mi nota final.",
}
