import pytest
from pydantic import ValidationError

from sessionlog.core.config import Settings


def test_local_defaults(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    s = Settings(_env_file=None, ENVIRONMENT="local")

    assert s.SECRET_KEY is None
    assert s.AUDIT_DEFAULT_PAGE_SIZE == 20
    assert s.AUDIT_MAX_PAGE_SIZE == 100
    assert s.ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60
    assert s.ALLOWED_ORIGINS == ["http://localhost:5173", "http://localhost:3000"]


def test_secret_key_required_outside_local(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ENVIRONMENT="production")


def test_secret_key_accepted():
    s = Settings(_env_file=None, ENVIRONMENT="production", SECRET_KEY="x" * 40)
    assert s.SECRET_KEY.get_secret_value() == "x" * 40


def test_max_page_size_below_default_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, AUDIT_DEFAULT_PAGE_SIZE=50, AUDIT_MAX_PAGE_SIZE=10)
