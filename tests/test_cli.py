"""
Tests for the ``perilla`` command line tool.

Prompts are answered by patching ``input`` and ``getpass.getpass``;
network access is replaced by a fake ``requests.get``.
"""

import asyncio
import getpass
import io
import zipfile

import pytest

from perilla_api import cli
from perilla_api.app.core.config import load_config
from perilla_api.app.core.constants import ADMINISTRATOR_ID
from perilla_api.app.core.context import AppContext
from perilla_api.app.schemas.entry import EntryType


def answer(monkeypatch, *answers, password="s3cret"):
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies, ""))
    monkeypatch.setattr(getpass, "getpass", lambda prompt="": password)


def open_installation(config_path):
    context = AppContext.from_config(load_config(str(config_path)))
    context.init()
    return context


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def installed(workdir, monkeypatch):
    """A fresh installation created with the default answers."""
    config_path = workdir / "config.json"
    answer(monkeypatch)
    assert cli.main(["--config", str(config_path), "init"]) == 0
    return config_path


class TestInit:
    def test_creates_config_and_administrator(self, installed):
        config = load_config(str(installed))
        assert config.http.port == 8680
        assert len(config.session_secret) == 25

        context = open_installation(installed)
        try:
            admin = asyncio.run(context.entries.authenticate(ADMINISTRATOR_ID, "s3cret"))
            assert admin is not None
            assert admin.email == "admin@perilla.js.org"
            assert asyncio.run(context.systemmaps.is_admin(ADMINISTRATOR_ID))
        finally:
            context.close()

    def test_custom_answers(self, workdir, monkeypatch):
        config_path = workdir / "config.json"
        answer(monkeypatch, "data.db", "", "", "", "", "0.0.0.0", "70000", "9000", "secret")
        assert cli.main(["--config", str(config_path), "init"]) == 0

        config = load_config(str(config_path))
        assert config.db.url == "data.db"
        assert config.http.hostname == "0.0.0.0"
        # out of range answers are asked again
        assert config.http.port == 9000
        assert config.session_secret == "secret"
        assert (workdir / "data.db").exists()

    def test_reinstall_requires_confirmation(self, installed, monkeypatch):
        before = installed.read_text(encoding="utf-8")
        answer(monkeypatch, "n")
        assert cli.main(["--config", str(installed), "init"]) == 0
        assert installed.read_text(encoding="utf-8") == before

    def test_reinstall_wipes_data(self, installed, monkeypatch):
        context = open_installation(installed)
        asyncio.run(context.systemmaps.remove(ADMINISTRATOR_ID))
        context.close()

        answer(monkeypatch, "y", password="new")
        assert cli.main(["--config", str(installed), "init"]) == 0

        context = open_installation(installed)
        try:
            assert asyncio.run(context.systemmaps.is_admin(ADMINISTRATOR_ID))
            assert asyncio.run(context.entries.authenticate(ADMINISTRATOR_ID, "new")) is not None
        finally:
            context.close()


class TestEntry:
    def test_create_user(self, installed, monkeypatch, capsys):
        answer(monkeypatch, "alice@example.com", "Setter", "0", password="pw")
        assert cli.main(["--config", str(installed), "entry", "alice", "--create"]) == 0
        assert "Welcome, alice." in capsys.readouterr().out

        context = open_installation(installed)
        try:
            alice = asyncio.run(context.entries.authenticate("alice", "pw"))
            assert alice.email == "alice@example.com"
            assert alice.description == "Setter"
        finally:
            context.close()

    def test_create_group(self, installed, monkeypatch):
        answer(monkeypatch, "", "", "1")
        assert cli.main(["--config", str(installed), "entry", "staff", "-c"]) == 0

        context = open_installation(installed)
        try:
            assert asyncio.run(context.entries.get_entry("staff")).type == EntryType.group
        finally:
            context.close()

    def test_create_duplicate(self, installed, monkeypatch, capsys):
        answer(monkeypatch, "", "", "0")
        assert cli.main(["--config", str(installed), "entry", ADMINISTRATOR_ID, "-c"]) == 0
        assert "already exists" in capsys.readouterr().out

    def test_remove(self, installed, monkeypatch, capsys):
        answer(monkeypatch, "", "", "1")
        cli.main(["--config", str(installed), "entry", "staff", "-c"])
        assert cli.main(["--config", str(installed), "entry", "staff", "--remove"]) == 0
        assert cli.main(["--config", str(installed), "entry", "staff", "--remove"]) == 0
        assert "Entry not found" in capsys.readouterr().out

    def test_modify(self, installed, monkeypatch):
        answer(monkeypatch, "root@example.com", "", "y", password="changed")
        assert cli.main(["--config", str(installed), "entry", ADMINISTRATOR_ID, "--modify"]) == 0

        context = open_installation(installed)
        try:
            admin = asyncio.run(context.entries.authenticate(ADMINISTRATOR_ID, "changed"))
            assert admin.email == "root@example.com"
            assert admin.description == "System administrator"
        finally:
            context.close()

    def test_missing_config(self, workdir, capsys):
        assert cli.main(["--config", str(workdir / "none.json"), "entry", "alice", "-r"]) == 1
        assert "Cannot load config" in capsys.readouterr().out


class FakeResponse:
    def __init__(self, payload=None, content=b""):
        self.payload = payload
        self.content = content

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def dist_zip():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("index.html", "<html></html>")
    return buffer.getvalue()


class TestFrontend:
    def test_download(self, workdir, monkeypatch):
        requested = []

        def fake_get(url, **kwargs):
            requested.append(url)
            if url == cli.FRONTEND_LATEST_URL:
                return FakeResponse({"tag_name": "v1.2.3"})
            return FakeResponse(content=dist_zip())

        monkeypatch.setattr(cli.requests, "get", fake_get)
        assert cli.main(["frontend", "--download"]) == 0

        assert requested[1].endswith("/releases/download/v1.2.3/dist.zip")
        assert (workdir / "frontend" / "index.html").read_text() == "<html></html>"

    def test_missing_tag(self, workdir, monkeypatch, capsys):
        monkeypatch.setattr(cli.requests, "get", lambda url, **kwargs: FakeResponse({}))
        assert cli.main(["frontend", "-d"]) == 0
        assert "Fetch latest frontend version failed" in capsys.readouterr().out
        assert not (workdir / "frontend").exists()
