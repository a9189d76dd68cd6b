import logging
import secrets
import time
from typing import Callable

from matchmaking.config import Settings, settings
from matchmaking.models.admin import AdminAccount
from matchmaking.models.user import UserAccount
from matchmaking.services.auth_service import (
    create_admin_token,
    create_user_token,
    hash_password,
    verify_password,
)
from matchmaking.services.email_services import send_password_reset_email
from matchmaking.services.google_auth_service import verify_google_id_token
from matchmaking.services.record_store import Predicate, RecordStore
from matchmaking.utils.errors import Conflict, InvalidCredential, NotFound, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


class AccountService:
    """Sign-up, sign-in and password reset for users, plus admin accounts."""

    def __init__(
        self,
        store: RecordStore,
        config: Settings = settings,
        send_reset_email: Callable[[str, str], None] = send_password_reset_email,
        verify_google_token: Callable[[str], tuple[str, str, bool]] = verify_google_id_token,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.config = config
        self.send_reset_email = send_reset_email
        self.verify_google_token = verify_google_token
        self.clock = clock

    # ---- lookups ----

    def find_user_by_email(self, email: str) -> UserAccount | None:
        items = self.store.scan("users", Predicate().where("email", email.strip().lower()))
        return UserAccount.from_item(items[0]) if items else None

    def _find_user_by_google_sub(self, subject: str) -> UserAccount | None:
        items = self.store.scan("users", Predicate().where("google_sub", subject))
        return UserAccount.from_item(items[0]) if items else None

    def _find_admin(self, username: str) -> AdminAccount | None:
        items = self.store.scan("admins", Predicate().where("username", username))
        return AdminAccount.from_item(items[0]) if items else None

    # ---- users ----

    def sign_up(self, username: str, email: str, password: str) -> UserAccount:
        email = email.strip().lower()
        if self.find_user_by_email(email):
            raise Conflict("User with this email already exists")

        user = UserAccount(username=username, email=email, password_hash=hash_password(password))
        self.store.put_new("users", user.to_item())
        logger.info("User %s created", user.user_id)
        return user

    def sign_in(self, email: str, password: str) -> dict:
        user = self.find_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid email or password")
        return {"access_token": create_user_token(user.user_id), "token_type": "bearer", "user": user.public()}

    def google_sign_in(self, token: str) -> dict:
        subject, email, email_verified = self.verify_google_token(token)
        email = email.strip().lower()

        user = self._find_user_by_google_sub(subject)
        created = False
        if not user:
            # Linking and creating both trust the email, so it must be verified
            if not email_verified:
                raise InvalidCredential("Google account email is not verified")
            user = self.find_user_by_email(email)
            if user:
                # Link the federated identity to the existing password account
                self.store.update("users", user.user_id, {"google_sub": subject})
                user.google_sub = subject
            else:
                user = UserAccount(username=email.split("@")[0], email=email, google_sub=subject)
                self.store.put_new("users", user.to_item())
                created = True
                logger.info("User %s created from Google sign-in", user.user_id)

        return {
            "access_token": create_user_token(user.user_id),
            "token_type": "bearer",
            "created": created,
            "user": user.public(),
        }

    # ---- password reset ----

    def request_password_reset(self, email: str) -> None:
        user = self.find_user_by_email(email)
        if not user:
            raise NotFound("User not found")

        reset_token = secrets.token_hex(RESET_TOKEN_BYTES)
        expires = int(self.clock()) + self.config.RESET_TOKEN_TTL_SECONDS
        self.store.update("users", user.user_id, {"reset_token": reset_token, "reset_token_expires": expires})
        self.send_reset_email(user.email, reset_token)

    def reset_password(self, reset_token: str, new_password: str) -> None:
        items = self.store.scan("users", Predicate().where("reset_token", reset_token)) if reset_token else []
        user = UserAccount.from_item(items[0]) if items else None
        if not user or not user.reset_token_expires or user.reset_token_expires < self.clock():
            raise ValidationError("Invalid or expired reset token")

        # Clearing the token keeps it single-use
        user.password_hash = hash_password(new_password)
        user.reset_token = None
        user.reset_token_expires = None
        self.store.put("users", user.to_item())
        logger.info("Password reset for user %s", user.user_id)

    # ---- admins ----

    def create_admin(self, username: str, password: str) -> AdminAccount:
        if self._find_admin(username):
            raise Conflict("Admin already exists")

        admin = AdminAccount(username=username, password_hash=hash_password(password))
        self.store.put_new("admins", admin.to_item())
        logger.info("Admin %s created", admin.admin_id)
        return admin

    def login_admin(self, username: str, password: str) -> dict:
        admin = self._find_admin(username)
        if not admin or not verify_password(password, admin.password_hash):
            raise Unauthorized("Invalid username or password")
        return {
            "access_token": create_admin_token(admin.admin_id, admin.username),
            "token_type": "bearer",
            "admin": admin.public(),
        }
