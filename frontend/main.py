import pandas as pd
import streamlit as st

from defensoria.core.constants import (
    AREAS_PREVIAS,
    AREAS_PREVIAS_LABELS,
    MIN_EXPONE,
    MIN_SOLICITA,
    TIPOS_USUARIO,
)
from defensoria.core.logging import configure_logging
from defensoria.services.attachments import format_file_size
from defensoria.services.form_rules import OTRA_AREA, RULES, visible_errors
from defensoria.services.intake import IntakeSession

# --- CONFIGURACIÓN DE LA APP ---
st.set_page_config(
    page_title="Defensoría Universitaria",
    layout="centered",
    page_icon="⚖️",
)
configure_logging()

# --- ESTILOS CSS ---
st.markdown("""
<style>
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
    .badge-chip {
        display: inline-block;
        padding: 2px 10px;
        border-radius: 999px;
        font-size: 13px;
        font-weight: 600;
        color: #1b1b1b;
        background: #e5e7eb;
        border: 1px solid #d1d5db;
    }
    .chip-server { background: #bbf7d0; border-color: #22c55e; }
    .chip-local { background: #fde68a; border-color: #f59e0b; }
</style>
""", unsafe_allow_html=True)

ERROR_TEXT = {
    "required": "Este campo es obligatorio.",
    "email": "Ingrese un correo electrónico válido.",
    "pattern": "El formato no es válido.",
    "minlength": "El texto es demasiado corto.",
    "ningunaSeleccionada": "Seleccione al menos un área.",
}


# --- ESTADO DE LA SESIÓN ---
def get_intake() -> IntakeSession:
    if "intake" not in st.session_state:
        intake = IntakeSession()
        with st.spinner("Cargando filiales..."):
            intake.start()
        st.session_state.intake = intake
        st.session_state.form_version = 0
        st.session_state.uploader_version = 0
    return st.session_state.intake


def widget_key(name: str) -> str:
    return f"{name}_{st.session_state.form_version}"


def on_field_change(name: str) -> None:
    st.session_state.intake.set_field(name, st.session_state[widget_key(name)])
    if name in RULES:
        # Las reglas reescriben campos dependientes: recrear widgets.
        st.session_state.form_version += 1


def on_area_change(area: str) -> None:
    checked = st.session_state[widget_key(f"area_{area}")]
    st.session_state.intake.set_field(OTRA_AREA, {area: checked})
    st.session_state.form_version += 1


def on_branch_change() -> None:
    st.session_state.intake.select_branch(st.session_state[widget_key("filial")])
    st.session_state.form_version += 1


def show_errors(errors: dict, name: str) -> None:
    for code in errors.get(name, []):
        st.caption(f":red[{ERROR_TEXT.get(code, code)}]")


def text_field(label: str, name: str, errors: dict, area: bool = False, help: str | None = None) -> None:
    state = intake.form[name]
    widget = st.text_area if area else st.text_input
    widget(
        label,
        value=state.value,
        key=widget_key(name),
        disabled=not state.enabled,
        on_change=on_field_change,
        args=(name,),
        help=help,
    )
    show_errors(errors, name)


def select_field(label: str, name: str, options: list, errors: dict, loading: bool = False) -> None:
    state = intake.form[name]
    codes = [""] + [o.code for o in options]
    labels = {o.code: o.label for o in options}
    st.selectbox(
        label,
        options=codes,
        index=codes.index(state.value) if state.value in codes else 0,
        format_func=lambda c: labels.get(c, "Cargando..." if loading else "Seleccione"),
        key=widget_key(name),
        disabled=not state.enabled,
        on_change=on_field_change,
        args=(name,),
    )
    show_errors(errors, name)


def reset_widgets() -> None:
    st.session_state.form_version += 1
    st.session_state.uploader_version += 1


intake = get_intake()
errors = visible_errors(intake.form)

# --- CABECERA ---
st.title("⚖️ Defensoría Universitaria")
st.caption("Registro de quejas, reclamos y solicitudes")

directory = intake.directory
if directory.has_error:
    st.error(directory.error_message)
    if st.button("↻ Reintentar"):
        directory.load()
        st.rerun()

branch_codes = [""] + [b.legal_entity_code for b in directory.branches]
branch_names = {b.legal_entity_code: b.display_name for b in directory.branches}
current_branch = intake.branch.legal_entity_code if intake.branch else ""
st.selectbox(
    "Filial",
    options=branch_codes,
    index=branch_codes.index(current_branch) if current_branch in branch_codes else 0,
    format_func=lambda c: branch_names.get(c, "Seleccione una filial"),
    key=widget_key("filial"),
    on_change=on_branch_change,
    disabled=directory.is_loading or not directory.branches,
)
show_errors(intake.last_errors, "filial")

if intake.case:
    css_class = "chip-server" if intake.case.source == "server" else "chip-local"
    st.markdown(
        f'Expediente: <span class="badge-chip {css_class}">{intake.case.display_code}</span>',
        unsafe_allow_html=True,
    )

st.divider()

# --- DATOS PERSONALES ---
st.subheader("Datos del usuario")
col_a, col_b = st.columns(2)
with col_a:
    text_field("Nombres", "nombres", errors)
    text_field("DNI / Documento", "dni", errors)
    text_field("Teléfono", "telefono", errors, help="9 dígitos")
with col_b:
    text_field("Apellidos", "apellidos", errors)
    text_field("Domicilio", "domicilio", errors)
    text_field("Correo electrónico", "correo", errors)

tipo_codes = [""] + list(TIPOS_USUARIO)
tipo_value = intake.form.value("tipoUsuario")
st.radio(
    "Tipo de usuario",
    options=tipo_codes,
    index=tipo_codes.index(tipo_value) if tipo_value in tipo_codes else 0,
    format_func=lambda c: TIPOS_USUARIO.get(c, "Sin seleccionar"),
    horizontal=True,
    key=widget_key("tipoUsuario"),
    on_change=on_field_change,
    args=("tipoUsuario",),
)
show_errors(errors, "tipoUsuario")

col_c, col_d = st.columns(2)
with col_c:
    select_field(
        "Escuela profesional",
        "escuelaProfesional",
        intake.unidades.options,
        errors,
        loading=intake.unidades.loading,
    )
    select_field("Área / Servicio", "area", intake.departamentos.options, errors, loading=intake.departamentos.loading)
with col_d:
    select_field("Modalidad", "modalidad", intake.modalidades.options, errors, loading=intake.modalidades.loading)

# --- APODERADO ---
st.checkbox(
    "Actúo mediante apoderado",
    value=bool(intake.form.value("existeApoderado")),
    key=widget_key("existeApoderado"),
    on_change=on_field_change,
    args=("existeApoderado",),
)
if intake.form.value("existeApoderado"):
    col_e, col_f = st.columns(2)
    with col_e:
        text_field("Apellidos del apoderado", "apellidosApo", errors)
        text_field("Correo del apoderado", "correoApo", errors)
    with col_f:
        text_field("Nombres del apoderado", "nombresApo", errors)

# --- ÁREAS PREVIAS ---
st.subheader("¿Acudió antes a otra área?")
group = intake.form.value(OTRA_AREA) or {}
area_cols = st.columns(2)
for i, area in enumerate(AREAS_PREVIAS):
    with area_cols[i % 2]:
        st.checkbox(
            AREAS_PREVIAS_LABELS[area],
            value=bool(group.get(area)),
            key=widget_key(f"area_{area}"),
            on_change=on_area_change,
            args=(area,),
        )
show_errors(errors, OTRA_AREA)
if intake.form["textoOtros"].enabled:
    text_field("Especifique el área", "textoOtros", errors)

# --- EXPONE / SOLICITA ---
st.subheader("Detalle")
text_field(f"Expone (mínimo {MIN_EXPONE} caracteres)", "expone", errors, area=True)
text_field(f"Solicita (mínimo {MIN_SOLICITA} caracteres)", "solicita", errors, area=True)

# --- EVIDENCIAS ---
st.subheader("Evidencias")
manager = intake.attachments
uploaded_files = st.file_uploader(
    f"Adjunte hasta {manager.max_files} archivos ({format_file_size(manager.max_bytes)} máx. c/u)",
    accept_multiple_files=True,
    key=f"uploader_{st.session_state.uploader_version}",
)
if uploaded_files and st.button("➕ Agregar archivo(s)"):
    decisions = intake.add_files(uploaded_files)
    rejected = [d for d in decisions if not d.accepted]
    if rejected:
        st.session_state.flash = ("warning", f"Se omitieron {len(rejected)} archivo(s) no válidos o repetidos.")
    st.session_state.uploader_version += 1
    st.rerun()

if manager.items:
    st.dataframe(
        pd.DataFrame(
            [{"archivo": a.file_name, "tamaño": format_file_size(a.byte_size)} for a in manager.items]
        ),
        use_container_width=True,
        hide_index=True,
    )
    for idx, att in enumerate(manager.items):
        row = st.columns([4, 1])
        preview = manager.previews.get(att.preview_handle)
        if preview and (att.mime_type or "").startswith("image/"):
            row[0].image(preview, caption=att.file_name, width=160)
        else:
            row[0].markdown(f"📎 **{att.file_name}**")
        if row[1].button("🗑️ Quitar", key=f"rm_{att.preview_handle}"):
            intake.remove_file(idx)
            st.rerun()

st.divider()

# --- ACCIONES ---
flash = st.session_state.pop("flash", None)
if flash:
    level, text = flash
    getattr(st, level)(text)

act_clear, act_send = st.columns(2)
if act_clear.button("Limpiar", use_container_width=True):
    intake.limpiar_formulario()
    reset_widgets()
    st.rerun()

if act_send.button("Enviar", type="primary", disabled=intake.submitting, use_container_width=True):
    with st.spinner("Registrando expediente..."):
        result = intake.enviar_formulario()
    if result.ok:
        reset_widgets()
        st.session_state.flash = ("success", result.message)
    elif result.status == "failed":
        st.session_state.flash = ("error", result.message)
    else:
        st.session_state.flash = ("warning", result.message)
    st.rerun()
