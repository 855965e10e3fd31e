"""
Authentication sessions: sign-up, sign-in, sign-out, token refresh and email
verification, plus change notifications for anyone who needs to react to a
session starting or ending.

One SessionProvider is built by the application factory and stored on the
app; nothing in this module is a process-wide singleton.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import pytz
from flask import current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt,
    get_jwt_identity,
    verify_jwt_in_request,
)
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from churchhub.exceptions import ConflictError, MissingFieldsError, ValidationError
from churchhub.extensions import db
from churchhub.models import AuthEvent, Profile, User
from churchhub.repositories import UserRepository
from churchhub.utils.email import send_verification_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
VERIFY_SALT = "email-verification"


@dataclass(frozen=True)
class Session:
    user_id: int
    email: Optional[str] = None
    token_id: Optional[str] = None


@dataclass(frozen=True)
class SessionChange:
    event: AuthEvent
    user_id: int
    session: Optional[Session] = None
    token_id: Optional[str] = None


class SessionProvider:
    def __init__(self):
        self._subscribers = []
        self._lock = threading.Lock()

    # -- subscriptions -----------------------------------------------------

    def subscribe(self, on_change: Callable[[SessionChange], None]) -> Callable[[], None]:
        """Registers on_change; the returned callable removes it again."""
        with self._lock:
            self._subscribers.append(on_change)

        def unsubscribe():
            with self._lock:
                if on_change in self._subscribers:
                    self._subscribers.remove(on_change)

        return unsubscribe

    def _notify(self, change: SessionChange):
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(change)
            except Exception as e:
                logger.error(f"Session subscriber failed on {change.event.value}: {str(e)}")

    # -- account lifecycle -------------------------------------------------

    def sign_up(self, email, password, profile_attrs=None, commit=True):
        """
        Creates an unverified identity and its profile, then sends the
        verification email. With commit=False the caller owns the
        transaction (registration adds the role request to it).
        """
        missing = [name for name, value in (("email", email), ("password", password)) if not value]
        if missing:
            raise MissingFieldsError(missing)

        email = email.strip().lower()
        if "@" not in email:
            raise ValidationError("Invalid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        if UserRepository.find_by_email(email):
            logger.warning(f"Signup attempt with existing email: {email}")
            raise ConflictError("User already exists")

        profile_attrs = profile_attrs or {}
        user = User(email=email, password=generate_password_hash(password))
        profile = Profile(
            full_name=profile_attrs.get("full_name"),
            phone=profile_attrs.get("phone"),
            avatar_url=profile_attrs.get("avatar_url"),
        )
        UserRepository.sign_up(user, profile)
        if commit:
            db.session.commit()

        token = self.verification_token(user)
        send_verification_email(user, token)
        logger.info(f"User created: {user.email}")

        result = {"user": user.to_dict(), "verification_required": not user.is_verified}
        if current_app.testing:
            result["verification_token"] = token
        return result

    def sign_in(self, email, password):
        user = UserRepository.find_by_email(email or "")
        if not user or not check_password_hash(user.password, password or ""):
            logger.warning(f"Failed login attempt for: {email}")
            raise ValidationError("Invalid email or password")

        if current_app.config.get("REQUIRE_EMAIL_VERIFICATION", True) and not user.is_verified:
            logger.warning(f"Login attempt before email verification: {email}")
            raise ValidationError("Email not confirmed")

        session = Session(user_id=user.id, email=user.email)
        tokens = {
            "token": create_access_token(identity=str(user.id)),
            "refresh_token": create_refresh_token(identity=str(user.id)),
        }
        logger.info(f"User logged in successfully: {user.email}")
        self._notify(SessionChange(AuthEvent.SIGNED_IN, user.id, session))
        return {**tokens, "user": user.to_dict()}

    def sign_out(self, user_id: int, jti: str):
        UserRepository.revoke_token(jti, user_id)
        logger.info(f"User {user_id} signed out")
        self._notify(SessionChange(AuthEvent.SIGNED_OUT, user_id, None, token_id=jti))
        return {"message": "Signed out"}

    def refresh(self, user_id: int):
        user = UserRepository.find_by_id(user_id)
        if not user:
            raise ValidationError("User not found")
        session = Session(user_id=user.id, email=user.email)
        token = create_access_token(identity=str(user.id))
        self._notify(SessionChange(AuthEvent.TOKEN_REFRESHED, user.id, session))
        return {"token": token}

    def get_current_session(self) -> Optional[Session]:
        """The session carried by the current request's access token, if any."""
        try:
            verify_jwt_in_request(optional=True)
            identity = get_jwt_identity()
        except Exception as e:
            logger.info(f"Ignoring invalid session token: {str(e)}")
            return None

        if identity is None:
            return None

        user = UserRepository.find_by_id(int(identity))
        if not user:
            return None
        return Session(user_id=user.id, email=user.email, token_id=self.current_token_id())

    @staticmethod
    def current_token_id() -> Optional[str]:
        return get_jwt().get("jti")

    # -- email verification ------------------------------------------------

    @staticmethod
    def _serializer():
        return URLSafeTimedSerializer(current_app.config["JWT_SECRET_KEY"], salt=VERIFY_SALT)

    def verification_token(self, user: User) -> str:
        return self._serializer().dumps({"user_id": user.id, "email": user.email})

    def verify_email(self, token: str):
        max_age = current_app.config.get("EMAIL_VERIFICATION_MAX_AGE", 3 * 24 * 3600)
        try:
            data = self._serializer().loads(token, max_age=max_age)
        except SignatureExpired:
            raise ValidationError("Verification link has expired")
        except BadSignature:
            raise ValidationError("Invalid verification link")

        user = UserRepository.find_by_id(data.get("user_id"))
        if not user or user.email != data.get("email"):
            raise ValidationError("Invalid verification link")

        if not user.is_verified:
            user.email_verified_at = datetime.now(pytz.UTC)
            db.session.commit()
            logger.info(f"Email verified for user {user.id}")
        return {"message": "Email verified", "user": user.to_dict()}

    def resend_verification(self, email: str):
        response = {"message": "If that account exists and is unverified, a new link has been sent."}
        user = UserRepository.find_by_email(email or "")
        if user and not user.is_verified:
            token = self.verification_token(user)
            send_verification_email(user, token)
            if current_app.testing:
                response["verification_token"] = token
        else:
            logger.info(f"Verification resend skipped for {email}")
        return response
