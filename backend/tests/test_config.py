"""
配置：令牌签名只依赖 JWT_SECRET_KEY
"""
from jose import jwt

from oms.core.config import Settings, settings
from oms.services.auth_service import AuthService


def test_only_jwt_secret_is_configured():
    assert "JWT_SECRET_KEY" in Settings.model_fields
    assert "SECRET_KEY" not in Settings.model_fields


def test_access_token_is_signed_with_jwt_secret():
    token = AuthService(None).create_access_token({"sub": "alice"})

    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == "alice"
