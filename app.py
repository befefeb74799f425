"""
GuidedBook - Interactive course reader

Streamlit application for reading a guided e-book chapter by chapter.
Each chapter's exercises must be answered before the next one unlocks.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st

from guidedbook.access import (
    AccessController,
    AuthError,
    LocalSessionProvider,
    ProfileStore,
    RecoveryFlag,
    Screen,
    format_phone_number,
)
from guidedbook.classroom import (
    CatalogError,
    ChapterAvailability,
    CursorStore,
    Navigator,
    ProgressStore,
    SQLiteStorage,
    ViewMode,
    load_catalog,
)
from guidedbook.classroom.answers import selection_value, text_value
from guidedbook.config import configure_logging, load_settings
from guidedbook.schemas import ChecklistBlock, ExerciseBlock, InputListBlock, is_input_block
from guidedbook.viewer import (
    DEFAULT_FILENAME,
    get_chapter_css,
    get_report_css,
    is_option_disabled,
    render_chapter_header,
    render_display_block,
    render_exercise_header,
    render_incomplete_notice,
    render_report,
    render_report_pdf,
    resolve_illustration,
    selection_hint,
)


logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

LOCAL_NAMESPACE = "local"

st.set_page_config(
    page_title="GuidedBook",
    page_icon="📖",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "settings" not in st.session_state:
        settings = load_settings()
        configure_logging(settings.log_level)
        st.session_state.settings = settings

    settings = st.session_state.settings

    if "catalog" not in st.session_state:
        try:
            st.session_state.catalog = load_catalog(settings.catalog_path)
        except CatalogError as e:
            logger.error(f"Catalog failed to load: {e}")
            st.session_state.catalog = None
            st.session_state.catalog_error = str(e)

    if st.session_state.catalog is None:
        return

    if "navigator" not in st.session_state:
        storage = SQLiteStorage(settings.storage_db_path, user_id=LOCAL_NAMESPACE)
        st.session_state.storage = storage
        st.session_state.navigator = Navigator(
            st.session_state.catalog,
            ProgressStore(storage),
            CursorStore(storage),
        )

    if "access" not in st.session_state:
        profiles = ProfileStore(settings.accounts_db_path)
        params = st.query_params
        st.session_state.provider = LocalSessionProvider(profiles)
        st.session_state.access = AccessController(
            st.session_state.provider,
            profiles,
            st.session_state.navigator,
            RecoveryFlag(st.session_state.storage),
            recovery_link=params.get("type") == "recovery",
            purchase_success=bool(params.get("purchase_success")),
        )
        code = params.get("code")
        if code:
            try:
                st.session_state.provider.redeem_recovery_code(code)
            except AuthError as e:
                st.session_state.flash = ("error", str(e))
        st.query_params.clear()

    if "illustrations" not in st.session_state:
        st.session_state.illustrations = {}


def show_flash():
    """Show and consume a one-shot message."""
    flash = st.session_state.pop("flash", None)
    if not flash:
        return
    kind, text = flash
    if kind == "error":
        st.error(text)
    else:
        st.success(text)


def clear_answer_widgets():
    """Drop widget state so a new reader starts from empty inputs."""
    for key in [k for k in st.session_state.keys() if str(k).startswith("w_")]:
        del st.session_state[key]
    st.session_state.illustrations = {}


# -----------------------------------------------------------------------------
# Sidebar: Chapter List
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with the chapter list and account actions."""
    nav = st.session_state.navigator
    access = st.session_state.access

    st.sidebar.title(f"📖 {st.session_state.catalog.title}")

    stats = nav.get_progress_summary()
    st.sidebar.markdown(
        f"**Progresso:** {stats['completed']}/{stats['total_chapters']} capítulos "
        f"({stats['completion_percent']}%)"
    )
    st.sidebar.progress(stats['completion_percent'] / 100)

    st.sidebar.divider()
    st.sidebar.subheader("Capítulos")

    for nav_chapter in nav.get_navigation_list():
        chapter = nav_chapter.chapter
        indicator = nav.get_status_indicator(chapter.id)
        locked = nav_chapter.availability == ChapterAvailability.LOCKED

        col1, col2 = st.sidebar.columns([1, 9])
        with col1:
            st.markdown(indicator)
        with col2:
            if st.button(
                chapter.title,
                key=f"chapter_{chapter.id}",
                disabled=locked,
                use_container_width=True,
                type="primary" if nav_chapter.is_current else "secondary",
            ):
                nav.jump_to(chapter.id)
                st.rerun()

    st.sidebar.divider()
    if st.sidebar.button("👤 Minha Conta", use_container_width=True):
        nav.open_profile()
        st.rerun()
    if st.sidebar.button("Sair", use_container_width=True):
        access.sign_out()
        clear_answer_widgets()
        st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Chapter View
# -----------------------------------------------------------------------------

def _on_text_change(widget_key: str, answer_key: str):
    st.session_state.navigator.update_answer(answer_key, st.session_state[widget_key])


def _on_option_toggle(block: ChecklistBlock, option: str):
    st.session_state.navigator.toggle_option(block, option)


def render_illustration(chapter):
    """Render the chapter illustration, if enabled and available."""
    if not st.session_state.settings.illustrations_enabled or not chapter.image_prompt:
        return

    nav = st.session_state.navigator
    cache = st.session_state.illustrations
    if chapter.id not in cache:
        with st.spinner("Carregando ilustração..."):
            cache[chapter.id] = resolve_illustration(chapter, nav.progress)

    url = cache[chapter.id]
    if url:
        st.image(url, use_container_width=True)
    else:
        st.caption("Não foi possível carregar a imagem.")
        if st.button("Tentar novamente", key=f"retry_img_{chapter.id}"):
            cache[chapter.id] = resolve_illustration(chapter, nav.progress, force_retry=True)
            st.rerun()


def render_input_block(chapter_id: str, block):
    """Render an exercise, input list or checklist bound to the progress store."""
    nav = st.session_state.navigator
    progress = nav.progress

    st.markdown(render_exercise_header(block), unsafe_allow_html=True)
    if block.id is None:
        st.caption("Exercício sem identificador: respostas não são salvas.")
        return

    if isinstance(block, ExerciseBlock):
        widget_key = f"w_{chapter_id}_{block.id}"
        st.text_area(
            block.label or "Sua resposta",
            value=text_value(progress.get(block.id)),
            placeholder=block.placeholder or "",
            key=widget_key,
            on_change=_on_text_change,
            args=(widget_key, block.id),
            label_visibility="collapsed",
        )

    elif isinstance(block, InputListBlock):
        for prompt, answer_key in zip(block.prompts, block.answer_keys()):
            widget_key = f"w_{chapter_id}_{answer_key}"
            widget = st.text_area if block.input_type == "textarea" else st.text_input
            widget(
                prompt,
                value=text_value(progress.get(answer_key)),
                key=widget_key,
                on_change=_on_text_change,
                args=(widget_key, answer_key),
            )

    elif isinstance(block, ChecklistBlock):
        hint = selection_hint(block)
        if hint:
            st.markdown(f'<p class="selection-hint">{hint}</p>', unsafe_allow_html=True)
        selected = selection_value(progress.get(block.id))
        for i, option in enumerate(block.options):
            st.checkbox(
                option,
                value=option in selected,
                key=f"w_{chapter_id}_{block.id}_{i}",
                disabled=is_option_disabled(block, selected, option),
                on_change=_on_option_toggle,
                args=(block, option),
            )

    if block.is_optional:
        st.caption("Opcional")


def render_chapter_view():
    """Render the current chapter with its exercises and navigation."""
    nav = st.session_state.navigator
    chapter = nav.current_chapter

    st.markdown(get_chapter_css(), unsafe_allow_html=True)
    render_illustration(chapter)
    st.markdown(
        render_chapter_header(chapter, st.session_state.catalog.title),
        unsafe_allow_html=True,
    )

    for block in chapter.blocks:
        if is_input_block(block):
            render_input_block(chapter.id, block)
        else:
            st.markdown(render_display_block(block), unsafe_allow_html=True)

    render_navigation_bar()


def render_navigation_bar():
    """Render previous/next buttons; next is gated on completion."""
    nav = st.session_state.navigator
    pos, total = nav.get_chapter_position()
    complete = nav.is_current_chapter_complete()

    st.divider()
    if not complete:
        st.warning(render_incomplete_notice(nav.is_last))

    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        if not nav.is_first:
            if st.button("← Anterior", use_container_width=True):
                nav.previous()
                st.rerun()

    with col2:
        st.markdown(f"<center>Capítulo {pos} de {total}</center>", unsafe_allow_html=True)

    with col3:
        if nav.is_last:
            if st.button("Concluir Jornada", type="primary", disabled=not complete, use_container_width=True):
                nav.complete_journey()
                st.rerun()
        else:
            if st.button("Próximo →", type="primary", disabled=not complete, use_container_width=True):
                nav.next()
                st.rerun()


# -----------------------------------------------------------------------------
# Completion View
# -----------------------------------------------------------------------------

def render_completion_view():
    """Render the answers summary with PDF download."""
    nav = st.session_state.navigator
    access = st.session_state.access

    st.title("🎉 Jornada Concluída")
    st.markdown("Parabéns por chegar até aqui. Estas são as suas respostas ao longo do livro.")

    report = nav.build_report()
    st.markdown(get_report_css(), unsafe_allow_html=True)
    st.markdown(render_report(report), unsafe_allow_html=True)

    profile = access.current_profile()
    reader_name = profile.full_name if profile else None

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Baixar PDF",
            data=render_report_pdf(report, reader_name),
            file_name=DEFAULT_FILENAME,
            mime="application/pdf",
            disabled=report.is_empty,
            use_container_width=True,
        )
    with col2:
        if st.button("Recomeçar a leitura", use_container_width=True):
            nav.restart()
            st.rerun()


# -----------------------------------------------------------------------------
# Account Views
# -----------------------------------------------------------------------------

def render_profile_view():
    """Render the account form (name, phone, optional new password)."""
    access = st.session_state.access
    profile = access.current_profile()

    st.title("Minha Conta")
    st.markdown("Gerencie seus dados e sua senha.")
    show_flash()

    with st.form("profile_form"):
        full_name = st.text_input("Nome completo", value=(profile.full_name or "") if profile else "")
        phone = st.text_input("Telefone", value=(profile.phone or "") if profile else "", placeholder="(11) 98765-4321")
        password = st.text_input("Nova senha", type="password")
        confirmation = st.text_input("Confirmar nova senha", type="password")
        submitted = st.form_submit_button("Salvar alterações", type="primary")

    if submitted:
        try:
            access.save_profile(full_name, phone, password, confirmation)
            st.session_state.flash = ("success", "Dados atualizados com sucesso!")
        except AuthError as e:
            st.session_state.flash = ("error", str(e))
        st.rerun()

    if phone and format_phone_number(phone) != phone:
        st.caption(f"Será salvo como {format_phone_number(phone)}")

    if st.button("← Voltar"):
        access.finish_profile()
        st.rerun()


def render_recovery_view():
    """Render the new-password form after a recovery link."""
    access = st.session_state.access

    st.title("Criar Nova Senha")
    show_flash()

    with st.form("recovery_form"):
        password = st.text_input("Nova senha", type="password")
        confirmation = st.text_input("Confirmar nova senha", type="password")
        submitted = st.form_submit_button("Salvar nova senha", type="primary")

    if submitted:
        try:
            access.complete_recovery(password, confirmation)
            st.session_state.flash = ("success", "Senha atualizada! Faça login com a nova senha.")
        except AuthError as e:
            st.session_state.flash = ("error", str(e))
        st.rerun()


def render_login_view():
    """Render sign-in, sign-up and password reset."""
    provider = st.session_state.provider

    st.title(st.session_state.catalog.title)
    show_flash()

    tab_login, tab_signup, tab_reset = st.tabs(["Entrar", "Criar conta", "Esqueci a senha"])

    with tab_login:
        with st.form("login_form"):
            email = st.text_input("E-mail")
            password = st.text_input("Senha", type="password")
            if st.form_submit_button("Entrar", type="primary"):
                try:
                    provider.sign_in(email, password)
                except AuthError as e:
                    st.session_state.flash = ("error", str(e))
                st.rerun()

    with tab_signup:
        with st.form("signup_form"):
            full_name = st.text_input("Nome completo")
            email = st.text_input("E-mail", key="signup_email")
            password = st.text_input("Senha", type="password", key="signup_password")
            if st.form_submit_button("Criar conta", type="primary"):
                try:
                    provider.sign_up(email, password, full_name)
                except AuthError as e:
                    st.session_state.flash = ("error", str(e))
                st.rerun()

    with tab_reset:
        with st.form("reset_form"):
            email = st.text_input("E-mail", key="reset_email")
            if st.form_submit_button("Enviar código de redefinição"):
                try:
                    code = provider.request_password_reset(email)
                    st.session_state.flash = ("success", f"Código de redefinição: {code}")
                except AuthError as e:
                    st.session_state.flash = ("error", str(e))
                st.rerun()
        with st.form("redeem_form"):
            code = st.text_input("Código recebido")
            if st.form_submit_button("Redefinir senha"):
                try:
                    provider.redeem_recovery_code(code.strip())
                except AuthError as e:
                    st.session_state.flash = ("error", str(e))
                st.rerun()


def render_purchase_view():
    """Render the sales page for readers without access."""
    access = st.session_state.access

    st.title(st.session_state.catalog.title)
    if st.session_state.catalog.subtitle:
        st.subheader(st.session_state.catalog.subtitle)
    st.markdown(
        "Um guia prático, capítulo a capítulo, com exercícios para transformar "
        "o que você aprende em hábito."
    )
    if access.session:
        st.info("Sua conta ainda não tem acesso a este conteúdo.")
    if st.button("Já comprei, fazer login"):
        access.go_to_login()
        st.rerun()


def render_purchase_success_view():
    access = st.session_state.access

    st.title("Compra confirmada!")
    st.success(
        "Obrigado pela compra. Você receberá um e-mail para criar sua senha; "
        "depois é só entrar com o mesmo e-mail."
    )
    if st.button("Ir para o login", type="primary"):
        access.go_to_login()
        st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def render_reader():
    """Render the reader for signed-in readers with access."""
    nav = st.session_state.navigator
    render_sidebar()

    if nav.view_mode == ViewMode.PROFILE:
        render_profile_view()
    elif nav.view_mode == ViewMode.COMPLETION:
        render_completion_view()
    else:
        render_chapter_view()


def main():
    """Main application entry point."""
    init_session_state()

    if st.session_state.catalog is None:
        st.error(f"Catalog could not be loaded: {st.session_state.catalog_error}")
        return

    screen = st.session_state.access.screen()
    if screen == Screen.RECOVERY:
        render_recovery_view()
    elif screen == Screen.PURCHASE_SUCCESS:
        render_purchase_success_view()
    elif screen == Screen.READER:
        render_reader()
    elif screen == Screen.LOGIN:
        render_login_view()
    else:
        render_purchase_view()


if __name__ == "__main__":
    main()
