"""Tests for roles, auth context, passwords and JWT handling."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from rbac.context import AuthContext
from rbac.dependencies import get_auth_context
from rbac.jwt import (
    JWT_ALGORITHM,
    create_access_token,
    decode_token,
    get_jwt_secret,
    validate_access_token,
)
from rbac.password import hash_password, verify_password
from rbac.roles import ROLES, Role, get_role_info, parse_role
from staffing.errors import Unauthorized
from tests.helpers.factories import make_engineer, make_manager
from tests.helpers.memory_store import MemoryStore


class TestRoles:

    def test_every_role_has_info(self):
        assert set(ROLES) == set(Role)

    def test_only_managers_manage(self):
        assert get_role_info(Role.MANAGER).can_manage
        assert not get_role_info(Role.ENGINEER).can_manage

    def test_parse_role_rejects_unknown(self):
        assert parse_role("manager") is Role.MANAGER
        with pytest.raises(ValueError):
            parse_role("admin")


class TestAuthContext:

    def _ctx(self, user):
        return AuthContext(user_id=user.id, email=user.email, name=user.name, role=user.role)

    def test_manager_sees_everyone(self):
        ctx = self._ctx(make_manager())
        assert ctx.is_manager
        assert ctx.can_manage()
        assert ctx.can_view_engineer("anything")

    def test_engineer_sees_only_self(self):
        alice = make_engineer("Alice Engineer")
        bob = make_engineer("Bob Engineer")
        ctx = self._ctx(alice)

        assert ctx.is_engineer
        assert not ctx.can_manage()
        assert ctx.can_view_engineer(str(alice.id))
        assert not ctx.can_view_engineer(str(bob.id))
        assert not ctx.can_view_engineer("not-an-id")

    def test_to_dict(self):
        user = make_manager()
        data = self._ctx(user).to_dict()
        assert data["user_id"] == str(user.id)
        assert data["role"] == "manager"


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("engpass1")

        assert hashed != "engpass1"
        assert verify_password("engpass1", hashed)
        assert not verify_password("wrong", hashed)

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("")
        assert not verify_password("", "irrelevant")

    def test_too_long_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("x" * 73)

    def test_malformed_hash_does_not_verify(self):
        assert not verify_password("engpass1", "not-a-bcrypt-hash")


class TestJWT:

    def test_round_trip_claims(self):
        user = make_engineer()
        payload = decode_token(create_access_token(user))

        assert payload["sub"] == str(user.id)
        assert payload["email"] == user.email
        assert payload["role"] == "engineer"
        assert payload["type"] == "access"

    def test_default_expiry_is_seven_days(self):
        payload = decode_token(create_access_token(make_manager()))
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired_token_invalid(self):
        token = create_access_token(make_manager(), expires_delta=timedelta(seconds=-1))

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)
        assert validate_access_token(token) is None

    def test_wrong_secret_invalid(self):
        token = jwt.encode(
            {"sub": "x", "exp": 9999999999, "type": "access"},
            "another-secret-that-is-also-long-enough!!",
            algorithm=JWT_ALGORITHM,
        )
        assert validate_access_token(token) is None

    def test_non_access_token_invalid(self):
        token = jwt.encode(
            {"sub": "x", "exp": 9999999999, "type": "refresh"},
            get_jwt_secret(),
            algorithm=JWT_ALGORITHM,
        )
        assert validate_access_token(token) is None

    def test_short_secret_rejected(self, monkeypatch):
        from config.settings import get_settings
        import rbac.jwt as jwt_module

        monkeypatch.setenv("JWT_SECRET", "short")
        get_settings.cache_clear()
        jwt_module._jwt_secret_cache = None

        with pytest.raises(ValueError):
            get_jwt_secret()

    def test_dev_secret_generated_with_warning(self, monkeypatch):
        from config.settings import get_settings
        import rbac.jwt as jwt_module

        monkeypatch.delenv("JWT_SECRET", raising=False)
        monkeypatch.setenv("APP_ENVIRONMENT", "development")
        get_settings.cache_clear()
        jwt_module._jwt_secret_cache = None

        with pytest.warns(UserWarning):
            secret = get_jwt_secret()
        assert secret.startswith("DEV-ONLY-")

    def test_missing_secret_fatal_in_production(self, monkeypatch):
        from config.settings import get_settings
        import rbac.jwt as jwt_module

        monkeypatch.delenv("JWT_SECRET", raising=False)
        monkeypatch.setenv("APP_ENVIRONMENT", "production")
        get_settings.cache_clear()
        jwt_module._jwt_secret_cache = None

        with pytest.raises(RuntimeError):
            get_jwt_secret()


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetAuthContext:

    @pytest.mark.asyncio
    async def test_context_from_stored_user(self):
        store = MemoryStore()
        user = make_engineer()
        await store.users.add(user)
        token = create_access_token(user)

        ctx = await get_auth_context(credentials=_bearer(token), store=store)

        assert ctx.user_id == user.id
        assert ctx.role is Role.ENGINEER
        assert isinstance(ctx.token_exp, datetime)
        assert ctx.token_exp.tzinfo is not None
        assert ctx.token_exp == datetime.fromtimestamp(decode_token(token)["exp"], timezone.utc)
        assert ctx.token_exp > datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_missing_or_invalid_token_gives_no_context(self):
        store = MemoryStore()

        assert await get_auth_context(credentials=None, store=store) is None
        assert await get_auth_context(credentials=_bearer("not.a.token"), store=store) is None

    @pytest.mark.asyncio
    async def test_unknown_user_rejected(self):
        user = make_manager()
        token = create_access_token(user)

        with pytest.raises(Unauthorized):
            await get_auth_context(credentials=_bearer(token), store=MemoryStore())

    @pytest.mark.asyncio
    async def test_role_comes_from_store(self):
        store = MemoryStore()
        user = make_engineer()
        await store.users.add(user)
        token = jwt.encode(
            {"sub": str(user.id), "role": "manager", "type": "access",
             "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            get_jwt_secret(),
            algorithm=JWT_ALGORITHM,
        )

        ctx = await get_auth_context(credentials=_bearer(token), store=store)

        assert ctx.role is Role.ENGINEER
        assert not ctx.is_manager
