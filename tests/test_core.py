"""Tests for settings, admin tokens and the logging processors."""

from datetime import timedelta
from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.core.exceptions import TokenExpiredException
from app.core.logging import _stringify_ids
from app.core.security import (
    create_access_token,
    create_admin_token,
    decode_token,
    is_admin_payload,
    verify_token_type,
)


def test_production_rejects_development_secret() -> None:
    with pytest.raises(ValidationError):
        Settings(environment="production", secret_key="dev-portfolio-secret-change-me")

    configured = Settings(environment="production", secret_key="a-real-secret")
    assert configured.use_json_logs is True


def test_log_format_follows_environment_unless_overridden() -> None:
    assert Settings(environment="development").use_json_logs is False
    assert Settings(environment="development", log_json=True).use_json_logs is True
    assert Settings(environment="staging", secret_key="x", log_json=False).use_json_logs is False


def test_celery_result_backend_uses_redis_db_one() -> None:
    assert Settings(redis_url="redis://cache:6379/0").celery_backend_url == "redis://cache:6379/1"
    assert Settings(redis_url="redis://cache:6379").celery_backend_url == "redis://cache:6379/1"
    assert (
        Settings(celery_result_url="redis://results:6379/4").celery_backend_url
        == "redis://results:6379/4"
    )


def test_cleanup_hour_must_be_a_valid_hour() -> None:
    with pytest.raises(ValidationError):
        Settings(orphan_cleanup_hour=24)


def test_admin_token_round_trip() -> None:
    payload = decode_token(create_admin_token("portfolio-owner"))

    assert payload["sub"] == "portfolio-owner"
    assert verify_token_type(payload)
    assert is_admin_payload(payload)
    assert not is_admin_payload(decode_token(create_access_token({"sub": "x", "role": "viewer"})))


def test_decode_token_distinguishes_expired_from_garbage() -> None:
    assert decode_token("not.a.token") is None

    with pytest.raises(TokenExpiredException):
        decode_token(create_admin_token(expires_delta=timedelta(seconds=-1)))


def test_stringify_ids_processor() -> None:
    skill_id = uuid4()
    other = uuid4()

    event = _stringify_ids(None, "info", {"event": "skill_linked", "skill_id": skill_id, "ids": [other, "x"], "n": 2})

    assert event == {"event": "skill_linked", "skill_id": str(skill_id), "ids": [str(other), "x"], "n": 2}
