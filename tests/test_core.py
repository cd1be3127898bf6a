"""
Tests for the envelope, session tokens, password hashing and config.
"""

import json
import os

import pytest

from perilla_api.app.core.config import SystemConfig, load_config, save_config
from perilla_api.app.core.envelope import RESTResponse, normalize_validation_errors
from perilla_api.app.core.errors import AccessDenied, EntryNotFound, NotFound, PerillaError, ensure
from perilla_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from perilla_api.app.schemas.entrymap import EntryMapRead


class TestEnvelope:
    def test_send(self):
        assert RESTResponse.send([1, 2]).model_dump() == {"status": "success", "payload": [1, 2]}

    def test_send_none_keeps_payload(self):
        assert RESTResponse.send(None).model_dump() == {"status": "success", "payload": None}

    def test_end_has_no_payload(self):
        assert RESTResponse.end().model_dump() == {"status": "success"}

    def test_fail(self):
        assert RESTResponse.fail("Access denied").model_dump() == {"status": "failed", "payload": "Access denied"}

    def test_send_uses_field_aliases(self):
        relation = EntryMapRead(from_="alice", to="staff", admin=True)
        payload = RESTResponse.send(relation).model_dump()["payload"]
        assert payload["from"] == "alice"

    def test_normalize_validation_errors(self):
        errors = [
            {"loc": ("query", "id"), "msg": "field required"},
            {"loc": ("query", "id"), "msg": "again"},
            {"loc": ("body", "admin"), "msg": "not a bool"},
        ]
        assert normalize_validation_errors(errors) == "Invalid query: id, Invalid body: admin"
        assert normalize_validation_errors([]) == "Invalid request"


class TestErrors:
    def test_default_messages(self):
        assert AccessDenied().message == "Access denied"
        assert NotFound().message == "Not found"
        assert EntryNotFound().message == "Entry not found"
        assert isinstance(EntryNotFound(), NotFound)

    def test_custom_message(self):
        assert str(PerillaError("boom")) == "boom"

    def test_ensure(self):
        ensure(True, AccessDenied())
        with pytest.raises(AccessDenied):
            ensure(None, AccessDenied())


class TestSecurity:
    def test_token_roundtrip(self):
        token = create_access_token("alice", "secret", 60)
        claims = decode_access_token(token, "secret")
        assert claims["sub"] == "alice"

    def test_token_rejections(self):
        token = create_access_token("alice", "secret", 60)
        assert decode_access_token(token, "other") is None
        assert decode_access_token(create_access_token("alice", "secret", -1), "secret") is None
        assert decode_access_token("a.b", "secret") is None
        assert decode_access_token("a.b.c", "secret") is None

    def test_tampered_payload(self):
        header, _, signature = create_access_token("alice", "secret", 60).split(".")
        _, payload, _ = create_access_token("root", "secret", 60).split(".")
        assert decode_access_token(f"{header}.{payload}.{signature}", "secret") is None

    def test_password_hash(self):
        hashed = hash_password("hunter2")
        assert hashed != hash_password("hunter2")
        assert verify_password("hunter2", hashed)
        assert not verify_password("hunter3", hashed)
        assert not verify_password("hunter2", None)
        assert not verify_password("hunter2", "not-a-hash")


class TestConfig:
    def test_roundtrip(self, tmp_path):
        path = tmp_path / "config.json"
        config = SystemConfig(session_secret="s3cret")
        config.http.port = 9000
        save_config(config, str(path))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["sessionSecret"] == "s3cret"
        assert data["http"] == {"port": 9000, "hostname": "localhost", "https": False}

        loaded = load_config(str(path))
        assert loaded == config
        assert loaded.base_dir == str(tmp_path.resolve())

    def test_missing_keys_use_defaults(self):
        config = SystemConfig.from_dict({"sessionSecret": "x"})
        assert config.db.url == "perilla.db"
        assert config.redis.port == 6379
        assert config.http.port == 8680

    def test_database_path(self, tmp_path):
        config = SystemConfig(base_dir=str(tmp_path))
        assert config.database_path() == str((tmp_path / "perilla.db").resolve())

        config.db.url = ":memory:"
        assert config.database_path() == ":memory:"

        absolute = os.path.join(str(tmp_path), "other.db")
        config.db.url = absolute
        assert config.database_path() == absolute

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.json"))

    def test_environment_override(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.json"
        save_config(SystemConfig(session_secret="from-env"), str(path))
        monkeypatch.setenv("PERILLA_CONFIG", str(path))
        assert load_config().session_secret == "from-env"
