"""
Session and access flow - Who is signed in and which screen they see.

Provides:
- SessionProvider: the identity protocol the shell depends on
- LocalSessionProvider: ProfileStore-backed implementation
- RecoveryFlag: persisted "password recovery pending" marker
- AccessController: reacts to auth events and decides the current screen
"""

import logging
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from guidedbook.access.profiles import (
    MIN_PASSWORD_LENGTH,
    AccountError,
    ProfileStore,
    check_new_password,
    format_phone_number,
)
from guidedbook.classroom import PERSISTENCE_ERRORS, Navigator, StorageTransport, ViewMode
from guidedbook.config import RECOVERY_PENDING_KEY
from guidedbook.schemas import Profile


logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    PASSWORD_RECOVERY = "password_recovery"


class Screen(str, Enum):
    """Top-level screen the shell renders."""
    RECOVERY = "recovery"
    PURCHASE_SUCCESS = "purchase_success"
    READER = "reader"
    LOGIN = "login"
    PURCHASE = "purchase"


class AuthError(ValueError):
    """Sign-in or account action failed; the message is shown to the reader."""


@dataclass
class Session:
    user_id: str
    email: str


AuthHandler = Callable[[AuthEvent, Optional[Session]], None]


class SessionProvider(Protocol):
    def get_current_session(self) -> Optional[Session]: ...

    def on_auth_change(self, handler: AuthHandler) -> None: ...

    def sign_in(self, email: str, password: str) -> Session: ...

    def sign_up(self, email: str, password: str, full_name: str) -> Session: ...

    def sign_out(self) -> None: ...

    def update_password(self, password: str) -> None: ...

    def request_password_reset(self, email: str) -> str: ...


class LocalSessionProvider:
    """
    Session provider over the local ProfileStore.

    Password reset issues a one-time recovery code instead of mailing a
    link; redeeming it signs the reader in with a PASSWORD_RECOVERY event.
    """

    def __init__(self, profiles: ProfileStore):
        self.profiles = profiles
        self._session: Optional[Session] = None
        self._handlers: list[AuthHandler] = []
        self._recovery_codes: dict[str, Session] = {}

    def _emit(self, event: AuthEvent):
        for handler in self._handlers:
            handler(event, self._session)

    def get_current_session(self) -> Optional[Session]:
        return self._session

    def on_auth_change(self, handler: AuthHandler) -> None:
        self._handlers.append(handler)

    def sign_in(self, email: str, password: str) -> Session:
        account = self.profiles.authenticate(email, password)
        if account is None:
            raise AuthError("E-mail ou senha inválidos.")
        self._session = Session(user_id=account.id, email=account.email)
        logger.info(f"Signed in {account.email}")
        self._emit(AuthEvent.SIGNED_IN)
        return self._session

    def sign_up(self, email: str, password: str, full_name: str) -> Session:
        if not full_name.strip():
            raise AuthError("O campo Nome Completo é obrigatório.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"A senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres.")
        try:
            self.profiles.create_user(email, password=password, full_name=full_name.strip())
        except AccountError as e:
            raise AuthError("Este e-mail já está em uso.") from e
        return self.sign_in(email, password)

    def sign_out(self) -> None:
        if self._session:
            logger.info(f"Signed out {self._session.email}")
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT)

    def update_password(self, password: str) -> None:
        if self._session is None:
            raise AuthError("Sessão expirada. Entre novamente.")
        try:
            self.profiles.set_password(self._session.user_id, password)
        except AccountError as e:
            raise AuthError(f"A senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres.") from e

    def request_password_reset(self, email: str) -> str:
        """
        Issue a recovery code for a registered email.

        Raises:
            AuthError: If no account uses the email
        """
        account = self.profiles.find_user_by_email(email)
        if account is None:
            raise AuthError("O e-mail em questão não está cadastrado no sistema.")
        code = secrets.token_urlsafe(16)
        self._recovery_codes[code] = Session(user_id=account.id, email=account.email)
        logger.info(f"Issued password recovery code for {account.email}")
        return code

    def redeem_recovery_code(self, code: str) -> Session:
        """Sign in through a recovery code. Codes are single-use."""
        session = self._recovery_codes.pop(code, None)
        if session is None:
            raise AuthError("Link de recuperação inválido ou expirado.")
        self._session = session
        self._emit(AuthEvent.PASSWORD_RECOVERY)
        return session


class RecoveryFlag:
    """Persisted marker that a password reset is in progress."""

    def __init__(self, storage: StorageTransport, key: str = RECOVERY_PENDING_KEY):
        self.storage = storage
        self.key = key

    def is_pending(self) -> bool:
        try:
            return self.storage.read_key(self.key) == "true"
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Could not read recovery flag: {e}")
            return False

    def set(self):
        try:
            self.storage.write_key(self.key, "true")
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Recovery flag not persisted: {e}")

    def clear(self):
        try:
            self.storage.delete_key(self.key)
        except PERSISTENCE_ERRORS as e:
            logger.warning(f"Could not clear recovery flag: {e}")


class AccessController:
    """
    Maps auth events and profile state onto what the shell shows.

    The navigator's view mode doubles as the shell's view: LOGIN and
    PURCHASE_SUCCESS are set here, chapter views by the navigator.
    """

    def __init__(
        self,
        provider: SessionProvider,
        profiles: ProfileStore,
        navigator: Navigator,
        recovery_flag: RecoveryFlag,
        recovery_link: bool = False,
        purchase_success: bool = False,
    ):
        """
        Initialize controller and subscribe to auth events.

        Args:
            provider: Session provider
            profiles: Profile lookup for the access flag
            navigator: Reader navigator (view mode, cursor, progress)
            recovery_flag: Persisted recovery marker
            recovery_link: Whether the app was opened from a recovery link
            purchase_success: Whether the app was opened after checkout
        """
        self.provider = provider
        self.profiles = profiles
        self.navigator = navigator
        self.recovery_flag = recovery_flag
        self.has_saved_progress = len(navigator.progress) > 0

        self.is_password_recovery = recovery_link or recovery_flag.is_pending()
        if self.is_password_recovery:
            self.recovery_flag.set()
            self.navigator.open_profile()
        if purchase_success:
            self.navigator.view_mode = ViewMode.PURCHASE_SUCCESS

        provider.on_auth_change(self.handle_auth_event)

    @property
    def session(self) -> Optional[Session]:
        return self.provider.get_current_session()

    def current_profile(self) -> Optional[Profile]:
        session = self.session
        if session is None:
            return None
        return self.profiles.get_profile(session.user_id)

    def handle_auth_event(self, event: AuthEvent, session: Optional[Session]):
        logger.info(f"Auth event: {event.value}")

        if event == AuthEvent.PASSWORD_RECOVERY:
            self.recovery_flag.set()
            self.is_password_recovery = True
            self.navigator.open_profile()

        elif event == AuthEvent.SIGNED_IN:
            if self.recovery_flag.is_pending():
                self.is_password_recovery = True
                self.navigator.open_profile()
            else:
                self.is_password_recovery = False
                self.navigator.back_to_chapters()

        elif event == AuthEvent.SIGNED_OUT:
            self.recovery_flag.clear()
            self.is_password_recovery = False

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def sign_out(self):
        """Explicit sign-out: also drops local answers and the cursor."""
        self.provider.sign_out()
        self.navigator.progress.reset()
        self.navigator.reset_cursor()
        self.has_saved_progress = False

    def go_to_login(self):
        self.navigator.view_mode = ViewMode.LOGIN

    def finish_profile(self):
        """Leave the profile view: to login after recovery, else back to chapters."""
        if self.is_password_recovery:
            self.navigator.view_mode = ViewMode.LOGIN
        else:
            self.navigator.back_to_chapters()
        self.is_password_recovery = False
        self.recovery_flag.clear()

    def complete_recovery(self, password: str, confirmation: str):
        """
        Set the new password, sign out and go to the login view.

        Raises:
            AuthError: If the password pair is rejected
        """
        error = check_new_password(password, confirmation)
        if error:
            raise AuthError(error)
        self.provider.update_password(password)
        self.provider.sign_out()
        self.navigator.view_mode = ViewMode.LOGIN

    def save_profile(self, full_name: str, phone: str, password: str = "", confirmation: str = ""):
        """
        Update contact data, and the password if one was typed.

        Raises:
            AuthError: If there is no session or the password pair is rejected
        """
        session = self.session
        if session is None:
            raise AuthError("Sessão expirada. Entre novamente.")
        if password:
            error = check_new_password(password, confirmation)
            if error:
                raise AuthError(error)

        self.profiles.update_contact(session.user_id, full_name.strip(), format_phone_number(phone))
        if password:
            self.provider.update_password(password)

    # -------------------------------------------------------------------------
    # Screen selection
    # -------------------------------------------------------------------------

    def screen(self) -> Screen:
        session = self.session

        if self.is_password_recovery and session:
            return Screen.RECOVERY
        if self.navigator.view_mode == ViewMode.PURCHASE_SUCCESS:
            return Screen.PURCHASE_SUCCESS

        profile = self.current_profile()
        if session and profile and profile.has_access:
            return Screen.READER
        if self.navigator.view_mode == ViewMode.LOGIN:
            return Screen.LOGIN
        if session:
            return Screen.PURCHASE
        if self.has_saved_progress:
            return Screen.LOGIN
        return Screen.PURCHASE
