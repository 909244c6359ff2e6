"""
Sign-up, sign-in and sign-out against either the hosted auth service or
local accounts.

Both gateways validate input the same way and emit the same notifications;
they only differ in where credentials live.
"""
import logging
from abc import ABC, abstractmethod

import requests
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from models import db
from models.user import User
from app.auth.session import Session
from app.errors import AuthFailed, AuthUnavailable
from app.schemas.auth import AuthTokens, LoginRequest, SignupRequest
from app.services.notifications import EventType, NotificationEvent, notify
from app.store import StoreError
from app.utils import create_access_token, create_refresh_token, transactional
from app.utils.validation import parse_model

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT = "An account with this email already exists."


def _rejection_detail(resp) -> str:
    try:
        body = resp.json() if resp.content else {}
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    return str(body.get("msg") or body.get("error_description") or "")


class AuthGateway(ABC):
    def __init__(self, store, sink):
        self.store = store
        self.sink = sink

    @abstractmethod
    def _register(self, email, password, username) -> AuthTokens:
        ...

    @abstractmethod
    def _authenticate(self, email, password) -> AuthTokens:
        ...

    def _revoke(self, session) -> None:
        """Nothing to revoke for stateless tokens."""

    def sign_up(self, email, password, username) -> AuthTokens:
        data = parse_model(
            SignupRequest, {"email": email, "password": password, "username": username}
        )
        tokens = self._register(data.email, data.password, data.username)
        session = Session(tokens.user_id, tokens.email, tokens.access_token)
        try:
            self.store.for_session(session).upsert_profile(
                tokens.user_id, {"username": data.username}
            )
        except StoreError as e:
            logger.warning("Account %s created without profile: %s", tokens.user_id, e)
        notify(self.sink, NotificationEvent(
            type=EventType.SIGN_UP,
            user=data.email,
            payload={"user_id": tokens.user_id, "username": data.username},
        ))
        return tokens

    def sign_in(self, email, password) -> AuthTokens:
        data = parse_model(LoginRequest, {"email": email, "password": password})
        tokens = self._authenticate(data.email, data.password)
        notify(self.sink, NotificationEvent(
            type=EventType.LOGIN,
            user=data.email,
            payload={"user_id": tokens.user_id},
        ))
        return tokens

    def sign_out(self, session) -> None:
        self._revoke(session)
        notify(self.sink, NotificationEvent(
            type=EventType.LOGOUT,
            user=session.display_name,
            payload={"user_id": session.user_id},
        ))


class SupabaseAuthGateway(AuthGateway):
    """Talks to the hosted auth endpoints (``<url>/auth/v1``)."""

    def __init__(self, store, sink, base_url, api_key, *, timeout=10.0, http=None):
        super().__init__(store, sink)
        self.base_url = base_url.rstrip("/") + "/auth/v1"
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def _post(self, path, *, json=None, params=None, token=None):
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {token or self.api_key}"}
        try:
            return self.http.post(
                f"{self.base_url}/{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Auth service request %s failed: %s", path, e)
            raise AuthUnavailable() from e

    @staticmethod
    def _tokens(resp, email):
        try:
            body = resp.json()
            user = body.get("user") or body
            return AuthTokens(
                access_token=body.get("access_token"),
                refresh_token=body.get("refresh_token"),
                expires_in=body.get("expires_in"),
                user_id=user["id"],
                email=user.get("email") or email,
            )
        except (ValueError, AttributeError, KeyError) as e:
            logger.error("Auth service returned an unreadable session: %s", e)
            raise AuthUnavailable() from e

    def _register(self, email, password, username):
        resp = self._post("signup", json={
            "email": email,
            "password": password,
            "data": {"username": username},
        })
        if resp.status_code >= 500:
            raise AuthUnavailable()
        if resp.status_code >= 400:
            detail = _rejection_detail(resp)
            logger.info("Sign-up rejected for %s: %s", email, detail)
            if "registered" in detail or "exists" in detail:
                raise AuthFailed(DUPLICATE_ACCOUNT)
            raise AuthFailed(detail or None)
        return self._tokens(resp, email)

    def _authenticate(self, email, password):
        resp = self._post(
            "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if resp.status_code >= 500:
            raise AuthUnavailable()
        if resp.status_code >= 400:
            logger.info("Sign-in rejected for %s (status %s)", email, resp.status_code)
            raise AuthFailed()
        return self._tokens(resp, email)

    def _revoke(self, session):
        try:
            resp = self._post("logout", token=session.access_token)
        except AuthUnavailable:
            logger.warning("Could not revoke session of %s", session.user_id)
            return
        if resp.status_code >= 400:
            logger.warning(
                "Session revoke for %s answered %s", session.user_id, resp.status_code
            )


class LocalAuthGateway(AuthGateway):
    """Accounts in the local ``users`` table, tokens minted here."""

    @staticmethod
    def _issue(user):
        return AuthTokens(
            access_token=create_access_token(user.id, user.email),
            refresh_token=create_refresh_token(user.id),
            expires_in=current_app.config["ACCESS_TOKEN_LIFETIME_MIN"] * 60,
            user_id=user.id,
            email=user.email,
        )

    def _register(self, email, password, username):
        email = email.lower()
        if User.query.filter_by(email=email).first():
            raise AuthFailed(DUPLICATE_ACCOUNT)
        user = User(email=email, password_hash=generate_password_hash(password))
        try:
            with transactional("Failed to create account"):
                db.session.add(user)
        except IntegrityError as e:
            raise AuthFailed(DUPLICATE_ACCOUNT) from e
        except SQLAlchemyError as e:
            raise AuthUnavailable() from e
        return self._issue(user)

    def _authenticate(self, email, password):
        user = User.query.filter_by(email=email.lower()).first()
        if not user or not check_password_hash(user.password_hash, password):
            logger.info("Sign-in rejected for %s", email)
            raise AuthFailed()
        return self._issue(user)


def build_auth_gateway(config, store, sink) -> AuthGateway:
    if config.get("STORE_BACKEND") == "rest":
        return SupabaseAuthGateway(
            store,
            sink,
            config["DATA_STORE_URL"],
            config["DATA_STORE_KEY"],
            timeout=config.get("STORE_TIMEOUT_SECONDS", 10.0),
        )
    return LocalAuthGateway(store, sink)
