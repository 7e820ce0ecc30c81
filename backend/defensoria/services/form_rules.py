"""Reglas del formulario de la Defensoría Universitaria.

El estado del formulario es inmutable: cada cambio produce un ``FormState``
nuevo. ``apply_change`` asigna el valor del campo y ejecuta solo la regla que
ese campo gobierna (tipo de usuario, apoderado o grupo de áreas). Las reglas
escriben los campos dependientes directamente, sin volver a despachar
``apply_change``, de modo que ninguna regla dispara a otra.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable

from defensoria.core.constants import (
    AREA_OTRO,
    AREAS_PREVIAS,
    DOCUMENTO_PATTERN,
    EMAIL_PATTERN,
    MIN_EXPONE,
    MIN_SOLICITA,
    MIN_TEXTO_OTROS,
    TELEFONO_PATTERN,
    TIPO_ADMINISTRATIVO,
)

OTRA_AREA = "otraArea"
ERROR_NINGUNA_SELECCIONADA = "ningunaSeleccionada"

ACADEMIC_FIELDS = ("escuelaProfesional", "modalidad")
ADMINISTRATIVE_FIELDS = ("area",)
APODERADO_FIELDS = ("apellidosApo", "nombresApo", "correoApo")


@dataclass(frozen=True)
class FieldState:
    value: Any = ""
    enabled: bool = True
    required: bool = False
    touched: bool = False


Validator = Callable[[Any], "str | None"]


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def pattern(regex: str, code: str = "pattern") -> Validator:
    compiled = re.compile(regex)

    def _check(value: Any) -> str | None:
        text = _text(value)
        if text and not compiled.match(text):
            return code
        return None

    return _check


def min_length(size: int) -> Validator:
    def _check(value: Any) -> str | None:
        text = _text(value)
        if text and len(text) < size:
            return "minlength"
        return None

    return _check


email = pattern(EMAIL_PATTERN, code="email")

# campo -> (valor inicial, habilitado, requerido, validadores)
FIELD_SPECS: dict[str, tuple[Any, bool, bool, tuple[Validator, ...]]] = {
    "nombres": ("", True, True, ()),
    "apellidos": ("", True, True, ()),
    "dni": ("", True, True, (pattern(DOCUMENTO_PATTERN),)),
    "domicilio": ("", True, True, ()),
    "telefono": ("", True, True, (pattern(TELEFONO_PATTERN),)),
    "correo": ("", True, True, (email,)),
    "tipoUsuario": ("", True, True, ()),
    "escuelaProfesional": ("", True, True, ()),
    "modalidad": ("", True, True, ()),
    "area": ("", False, False, ()),
    "existeApoderado": (False, True, False, ()),
    "apellidosApo": ("", False, False, ()),
    "nombresApo": ("", False, False, ()),
    "correoApo": ("", False, False, (email,)),
    OTRA_AREA: (None, True, False, ()),
    "textoOtros": ("", False, False, (min_length(MIN_TEXTO_OTROS),)),
    "expone": ("", True, True, (min_length(MIN_EXPONE),)),
    "solicita": ("", True, True, (min_length(MIN_SOLICITA),)),
}


def _initial_value(name: str) -> Any:
    if name == OTRA_AREA:
        return {key: False for key in AREAS_PREVIAS}
    return FIELD_SPECS[name][0]


@dataclass(frozen=True)
class FormState:
    fields: dict[str, FieldState] = field(default_factory=dict)

    def __getitem__(self, name: str) -> FieldState:
        return self.fields[name]

    def value(self, name: str) -> Any:
        return self.fields[name].value

    def update(self, **changes: FieldState) -> FormState:
        merged = dict(self.fields)
        merged.update(changes)
        return FormState(fields=merged)

    def selected_areas(self) -> list[str]:
        group = self.value(OTRA_AREA) or {}
        return [key for key in AREAS_PREVIAS if group.get(key)]


def _pristine() -> FormState:
    return FormState(
        fields={
            name: FieldState(value=_initial_value(name), enabled=enabled, required=required)
            for name, (_, enabled, required, _) in FIELD_SPECS.items()
        }
    )


def initial_form_state() -> FormState:
    return apply_otra_area(apply_apoderado(apply_tipo_usuario(_pristine(), ""), False))


# ---------------------------------------------------------------------------
# Reglas
# ---------------------------------------------------------------------------
def _enable(f: FieldState, required: bool = True) -> FieldState:
    return replace(f, enabled=True, required=required)


def _disable(f: FieldState, name: str) -> FieldState:
    return replace(f, value=_initial_value(name), enabled=False, required=False)


def apply_tipo_usuario(state: FormState, value: Any) -> FormState:
    """Administrativo usa área/servicio; el resto, escuela profesional y modalidad."""
    administrative = _text(value) == TIPO_ADMINISTRATIVO
    enabled_track = ADMINISTRATIVE_FIELDS if administrative else ACADEMIC_FIELDS
    disabled_track = ACADEMIC_FIELDS if administrative else ADMINISTRATIVE_FIELDS
    changes = {name: _enable(state[name]) for name in enabled_track}
    changes.update({name: _disable(state[name], name) for name in disabled_track})
    return state.update(**changes)


def apply_apoderado(state: FormState, flag: Any) -> FormState:
    if bool(flag):
        changes = {name: _enable(state[name]) for name in APODERADO_FIELDS}
    else:
        changes = {name: _disable(state[name], name) for name in APODERADO_FIELDS}
    return state.update(**changes)


def apply_otra_area(state: FormState) -> FormState:
    group = state.value(OTRA_AREA) or {}
    if group.get(AREA_OTRO):
        return state.update(textoOtros=_enable(state["textoOtros"]))
    return state.update(textoOtros=_disable(state["textoOtros"], "textoOtros"))


RULES: dict[str, Callable[[FormState], FormState]] = {
    "tipoUsuario": lambda s: apply_tipo_usuario(s, s.value("tipoUsuario")),
    "existeApoderado": lambda s: apply_apoderado(s, s.value("existeApoderado")),
    OTRA_AREA: apply_otra_area,
}


def _merge_group(current: dict[str, bool], value: Any) -> dict[str, bool]:
    if not isinstance(value, dict):
        raise TypeError("otraArea expects a mapping of area -> bool")
    unknown = set(value) - set(AREAS_PREVIAS)
    if unknown:
        raise KeyError(f"Unknown areas: {sorted(unknown)}")
    merged = dict(current)
    merged.update({key: bool(v) for key, v in value.items()})
    return merged


def apply_change(state: FormState, name: str, value: Any) -> FormState:
    current = state[name]
    if name == OTRA_AREA:
        value = _merge_group(current.value or {}, value)
    elif name == "existeApoderado":
        value = bool(value)
    updated = state.update(**{name: replace(current, value=value, touched=True)})
    rule = RULES.get(name)
    return rule(updated) if rule else updated


def set_area(state: FormState, area: str, checked: bool) -> FormState:
    return apply_change(state, OTRA_AREA, {area: checked})


# ---------------------------------------------------------------------------
# Validación
# ---------------------------------------------------------------------------
def _is_empty(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return _text(value) == ""


def validate_otra_area(state: FormState) -> list[str]:
    return [] if state.selected_areas() else [ERROR_NINGUNA_SELECCIONADA]


def validate_form(state: FormState) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for name, f in state.fields.items():
        if not f.enabled or name == OTRA_AREA:
            continue
        field_errors: list[str] = []
        if f.required and _is_empty(f.value):
            field_errors.append("required")
        else:
            for check in FIELD_SPECS[name][3]:
                code = check(f.value)
                if code:
                    field_errors.append(code)
        if field_errors:
            errors[name] = field_errors
    group_errors = validate_otra_area(state)
    if group_errors:
        errors[OTRA_AREA] = group_errors
    return errors


def is_valid(state: FormState) -> bool:
    return not validate_form(state)


def mark_all_touched(state: FormState) -> FormState:
    return FormState(fields={name: replace(f, touched=True) for name, f in state.fields.items()})


def reset_fields(state: FormState, names: Iterable[str]) -> FormState:
    return state.update(
        **{name: replace(state[name], value=_initial_value(name), touched=False) for name in names}
    )


def visible_errors(state: FormState) -> dict[str, list[str]]:
    """Errores de los campos ya tocados, para pintar mensajes en pantalla."""
    return {name: errs for name, errs in validate_form(state).items() if state[name].touched}
