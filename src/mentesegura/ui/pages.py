"""
NiceGUI pages — landing, sign in / sign up, and the student dashboard.
"""
from typing import Optional

from nicegui import ui, app

from mentesegura.config import get_config
from mentesegura.errors import MenteSeguraError
from mentesegura.services.auth_service import get_auth_service
from mentesegura.services.chat_controller import ChatController, ChatMessage, Notice
from mentesegura.services.conversation_service import get_conversation_service
from mentesegura.services.notifier import get_notifier
from mentesegura.services.relay_client import RelayClient
from mentesegura.ui import content
from mentesegura.ui.theme import get_theme, generate_css

SESSION_TOKEN_KEY = "access_token"
SESSION_USER_KEY = "user_id"


def _apply_theme() -> dict:
    cfg = get_config()
    theme = get_theme(cfg.ui.primary, cfg.ui.secondary)
    ui.add_head_html(f"<style>{generate_css(theme)}</style>")
    ui.add_head_html("""
        <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap" rel="stylesheet">
    """)
    return theme


def current_session() -> Optional[dict]:
    """Return the validated token payload stored for this browser, or None."""
    token = app.storage.user.get(SESSION_TOKEN_KEY)
    if not token:
        return None
    payload = get_auth_service().validate_access_token(token)
    if not payload:
        app.storage.user.pop(SESSION_TOKEN_KEY, None)
        app.storage.user.pop(SESSION_USER_KEY, None)
        return None
    return payload


def _toast(notice: Notice) -> None:
    ui.notify(f"{notice.title}: {notice.description}", type="negative", position="top-right")


class LandingPage:
    """Marketing page with the call to action."""

    def build(self):
        _apply_theme()
        with ui.column().classes("w-full items-center gap-16 py-16 px-4"):
            with ui.column().classes("items-center text-center max-w-3xl gap-6"):
                with ui.row().classes("gap-6"):
                    ui.icon("favorite", size="4rem").classes("animate-float").style("color: #ec4899")
                    ui.icon("psychology", size="4rem").classes("animate-float").style(
                        "color: #8b5cf6; animation-delay: 3s"
                    )
                ui.label(content.HERO_TITLE).classes("text-5xl font-bold gradient-text")
                ui.label(content.HERO_SUBTITLE).classes("text-xl muted")
                ui.button("Começar Agora", on_click=lambda: ui.navigate.to("/auth")).classes(
                    "gradient-bg px-8 py-2 text-lg"
                ).props("no-caps unelevated")

            ui.label("Como Podemos Ajudar").classes("text-4xl font-bold gradient-text")
            with ui.grid(columns=3).classes("w-full max-w-6xl gap-8"):
                for icon, title, description in content.FEATURES:
                    with ui.card().classes("feature-card p-8"):
                        ui.icon(icon, size="2rem").classes("gradient-text")
                        ui.label(title).classes("text-xl font-semibold")
                        ui.label(description).classes("muted")

            with ui.card().classes("feature-card p-12 max-w-3xl items-center text-center"):
                ui.label(content.CTA_TITLE).classes("text-3xl font-bold")
                ui.label(content.CTA_SUBTITLE).classes("text-lg muted")

            ui.label(content.FOOTER).classes("muted text-center text-sm")


class AuthPage:
    """Sign-in and sign-up forms."""

    def __init__(self):
        self.auth = get_auth_service()

    def build(self):
        if current_session():
            ui.navigate.to("/dashboard")
            return

        _apply_theme()
        with ui.column().classes("w-full items-center py-16 px-4"):
            with ui.card().classes("feature-card w-full max-w-md p-8"):
                ui.label("Apoio emocional").classes("text-2xl font-bold gradient-text self-center")
                with ui.tabs().classes("w-full").props("no-caps") as tabs:
                    signin_tab = ui.tab("Entrar")
                    signup_tab = ui.tab("Cadastrar")
                with ui.tab_panels(tabs, value=signin_tab).classes("w-full"):
                    with ui.tab_panel(signin_tab):
                        self._build_signin()
                    with ui.tab_panel(signup_tab):
                        self._build_signup()

    def _build_signin(self):
        email = ui.input("E-mail").classes("w-full")
        password = ui.input("Senha", password=True, password_toggle_button=True).classes("w-full")

        async def submit():
            tokens = await self.auth.login(email.value or "", password.value or "")
            if not tokens:
                ui.notify("E-mail ou senha inválidos.", type="negative")
                return
            app.storage.user[SESSION_TOKEN_KEY] = tokens["access_token"]
            app.storage.user[SESSION_USER_KEY] = tokens["user_id"]
            ui.navigate.to("/dashboard")

        ui.button("Entrar", on_click=submit).classes("w-full gradient-bg").props("no-caps unelevated")

    def _build_signup(self):
        full_name = ui.input("Nome completo").classes("w-full")
        email = ui.input("E-mail").classes("w-full")
        password = ui.input(
            "Senha", password=True, password_toggle_button=True,
            validation={"Mínimo de 6 caracteres": lambda v: len(v or "") >= get_config().auth.min_password_length},
        ).classes("w-full")

        async def submit():
            try:
                user = await self.auth.register_user(
                    email=email.value or "",
                    password=password.value or "",
                    full_name=full_name.value or None,
                )
            except ValueError as e:
                ui.notify(f"Erro ao criar conta: {e}", type="negative")
                return
            if user is None:
                ui.notify("Erro ao criar conta: este e-mail já está cadastrado.", type="negative")
                return

            tokens = await self.auth.login(email.value, password.value)
            app.storage.user[SESSION_TOKEN_KEY] = tokens["access_token"]
            app.storage.user[SESSION_USER_KEY] = tokens["user_id"]
            ui.notify("Bem-vindo(a)! Sua conta foi criada com sucesso.", type="positive")
            ui.navigate.to("/dashboard")

        ui.button("Criar conta", on_click=submit).classes("w-full gradient-bg").props("no-caps unelevated")


class ChatView:
    """Chat with Simone, rendered from a ChatController."""

    def __init__(self, conversation_id: str, user_id: str):
        self.cfg = get_config()
        self.user_id = user_id
        self.controller = ChatController(
            conversation_id=conversation_id,
            store=get_conversation_service(),
            relay=RelayClient(),
            token_provider=lambda: app.storage.user.get(SESSION_TOKEN_KEY),
            on_change=self._render,
            on_error=_toast,
            on_critical=self._on_critical,
        )
        self.message_container = None
        self.scroll_area = None
        self.input = None
        self.send_button = None

    def build(self):
        name = self.cfg.chat.assistant_name
        with ui.card().classes("feature-card w-full p-0").style("height: 600px"):
            with ui.row().classes("w-full items-center gap-3 p-4").style(
                "border-bottom: 1px solid #e7e0f3"
            ):
                ui.icon("favorite", size="2rem").style("color: #ec4899")
                with ui.column().classes("gap-0"):
                    ui.label(f"{name} - Sua Psicóloga Virtual").classes("font-semibold")
                    ui.label("Disponível para te ouvir").classes("text-sm muted")

            with ui.scroll_area().classes("w-full flex-grow p-4") as scroll:
                self.message_container = ui.column().classes("w-full gap-4")
                self.scroll_area = scroll

            with ui.row().classes("w-full items-center gap-2 p-4 no-wrap").style(
                "border-top: 1px solid #e7e0f3"
            ):
                self.input = ui.input(placeholder="Digite sua mensagem...").classes("flex-grow")
                self.input.on("keydown.enter", self._send)
                self.send_button = ui.button(icon="send", on_click=self._send).classes(
                    "gradient-bg"
                ).props("unelevated")

        self._render(self.controller)
        ui.timer(0.1, self.controller.load_messages, once=True)

    async def _send(self):
        text = self.input.value or ""
        if not text.strip() or self.controller.is_busy:
            return
        self.input.value = ""
        await self.controller.send(text)

    async def _on_critical(self, message: dict):
        await get_notifier().notify(message, user_id=self.user_id)

    def _render(self, controller: ChatController):
        if self.message_container is None:
            return
        busy = controller.is_busy
        self.input.set_enabled(not busy)
        self.send_button.set_enabled(not busy)

        self.message_container.clear()
        with self.message_container:
            if controller.loading_history:
                ui.label("Carregando conversa...").classes("muted self-center")
            elif not controller.messages:
                self._render_empty()
            for message in controller.messages:
                self._render_message(message)
        self.scroll_area.scroll_to(percent=1.0)

    def _render_empty(self):
        name = self.cfg.chat.assistant_name
        with ui.column().classes("w-full items-center text-center gap-2 py-12"):
            with ui.row().classes("gap-4"):
                ui.icon("favorite", size="3rem").classes("animate-float").style("color: #ec4899")
                ui.icon("psychology", size="3rem").classes("animate-float").style("color: #8b5cf6")
            ui.label(f"Olá! Eu sou a {name}").classes("text-lg font-semibold")
            ui.label(
                "Este é um espaço seguro para você expressar seus sentimentos. "
                "Eu estou aqui para te ouvir."
            ).classes("muted max-w-md")

    def _render_message(self, message: ChatMessage):
        is_user = message.role == "user"
        if is_user:
            bubble = "bubble bubble-user"
        elif message.is_critical:
            bubble = "bubble bubble-critical"
        else:
            bubble = "bubble bubble-assistant"
        if message.failed:
            bubble += " bubble-failed"

        with ui.row().classes("w-full " + ("justify-end" if is_user else "justify-start")):
            with ui.column().classes(bubble + " gap-1"):
                if message.is_critical and not is_user:
                    with ui.row().classes("items-center gap-2 critical-banner"):
                        ui.icon("warning", size="1rem")
                        ui.label("Situação que requer atenção")
                ui.label(message.content)


class DashboardUI:
    """Authenticated dashboard: chat, resources and emotional care tabs."""

    def __init__(self, user_id: str):
        self.user_id = user_id

    async def build(self):
        user = await get_auth_service().get_user_by_id(self.user_id)
        if user is None or not user.is_active:
            self._sign_out()
            return

        _apply_theme()

        with ui.header().classes("items-center justify-between px-4 py-3").style(
            "background: rgba(255,255,255,0.8); border-bottom: 1px solid #e7e0f3;"
        ):
            with ui.row().classes("items-center gap-3"):
                ui.icon("favorite", size="sm").style("color: #ec4899")
                ui.label(get_config().ui.title).classes("text-xl font-bold gradient-text")
            with ui.row().classes("items-center gap-4"):
                ui.label(f"Olá, {user.display_name}").classes("muted")
                ui.button("Sair", icon="logout", on_click=self._sign_out).props("outline no-caps")

        try:
            conversation = await get_conversation_service().get_or_create_for_user(self.user_id)
        except MenteSeguraError as e:
            ui.label(e.message).classes("muted self-center")
            return

        with ui.column().classes("w-full max-w-5xl mx-auto px-4 py-8"):
            with ui.tabs().classes("w-full").props("no-caps") as tabs:
                chat_tab = ui.tab("Conversar", icon="chat")
                resources_tab = ui.tab("Recursos", icon="menu_book")
                care_tab = ui.tab("Cuidados Emocionais", icon="event")

            with ui.tab_panels(tabs, value=chat_tab).classes("w-full bg-transparent"):
                with ui.tab_panel(chat_tab):
                    ChatView(conversation["id"], self.user_id).build()
                with ui.tab_panel(resources_tab):
                    self._build_resources()
                with ui.tab_panel(care_tab):
                    self._build_care()

    def _build_resources(self):
        with ui.card().classes("feature-card w-full p-8 gap-4"):
            ui.label("Recursos Educativos").classes("text-2xl font-bold")
            ui.label(content.RESOURCES_INTRO).classes("muted")
            for title, text in content.RESOURCES:
                with ui.column().classes("gap-1 p-4"):
                    ui.label(title).classes("font-semibold")
                    ui.label(text).classes("muted")

    def _build_care(self):
        with ui.card().classes("feature-card w-full p-8 gap-4"):
            ui.label("Cuidados Emocionais").classes("text-2xl font-bold")
            ui.label(content.CARE_INTRO).classes("muted")
            for title, text in content.CARE_SECTIONS:
                with ui.column().classes("gap-1"):
                    ui.label(title).classes("font-semibold")
                    ui.markdown(text).classes("muted")

    def _sign_out(self):
        app.storage.user.pop(SESSION_TOKEN_KEY, None)
        app.storage.user.pop(SESSION_USER_KEY, None)
        ui.navigate.to("/")
