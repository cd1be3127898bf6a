#!/usr/bin/env python3
"""
Operator command line tool.

Usage::

    perilla init                       # write config.json, create the database and the Administrator
    perilla entry alice --create       # create a user or group entry
    perilla entry alice --modify       # show an entry, change its profile or password
    perilla entry alice --remove       # delete an entry
    perilla frontend --download        # fetch the latest frontend release
    perilla serve                      # run the HTTP API

``--config`` (or ``PERILLA_CONFIG``) selects the config file; it
defaults to ``config.json`` in the current directory.  Errors are
printed and do not abort with a non-zero status, except when the
config file cannot be read.
"""

import argparse
import asyncio
import getpass
import io
import logging
import os
import secrets
import shutil
import string
import sys
import zipfile
from typing import Optional, Sequence

import requests

from perilla_api import __version__
from perilla_api.app.core.config import (
    DatabaseConfig,
    HttpConfig,
    RedisConfig,
    Settings,
    SystemConfig,
    get_config_path,
    load_config,
    save_config,
)
from perilla_api.app.core.constants import ADMINISTRATOR_EMAIL, ADMINISTRATOR_ID
from perilla_api.app.core.context import AppContext
from perilla_api.app.core.db import Database
from perilla_api.app.core.errors import EntryNotFound, PerillaError
from perilla_api.app.core.logging_config import setup_logging
from perilla_api.app.schemas.entry import EntryCreate, EntryType, EntryUpdate

logger = logging.getLogger(__name__)

FRONTEND_REPO = "ZhangZisu/perilla-frontend"
FRONTEND_LATEST_URL = f"https://api.github.com/repos/{FRONTEND_REPO}/releases/latest"
FRONTEND_DOWNLOAD_URL = "https://github.com/" + FRONTEND_REPO + "/releases/download/{tag}/dist.zip"
REQUEST_TIMEOUT = 30

# Files owned by an installation; removed when ``init`` reinstalls.
MANAGED_DIRS = ("files",)
MANAGED_FILES = ("app.log",)


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------

def ask(message: str, default: Optional[str] = None) -> str:
    suffix = f" [{default}]" if default is not None else ""
    answer = input(f"{message}{suffix}: ").strip()
    return answer or (default or "")


def ask_int(message: str, default: int, minimum: int, maximum: int) -> int:
    while True:
        answer = ask(message, str(default))
        try:
            value = int(answer)
        except ValueError:
            print(f"[WARN] Please enter a number between {minimum} and {maximum}")
            continue
        if minimum <= value <= maximum:
            return value
        print(f"[WARN] Please enter a number between {minimum} and {maximum}")


def confirm(message: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    answer = input(f"{message} ({hint}) ").strip().lower()
    if not answer:
        return default
    return answer in {"y", "yes"}


def read_password() -> str:
    return getpass.getpass("Please input password: ")


def random_secret(length: int = 25) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def open_context(config_path: str) -> AppContext:
    """Load the config and return an initialised context."""
    context = AppContext.from_config(load_config(config_path))
    context.init()
    return context


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

def uninstall(config_path: str) -> bool:
    """Remove an existing installation.  Returns False if the user aborts."""
    print("[INFO] config.json exists.")
    if not confirm("continue will overwrite exist data. confirm?"):
        return False
    print("[INFO] removing managed files...")
    try:
        old_config = load_config(config_path)
    except (OSError, ValueError) as e:
        print(f"[ERROR] {e}")
        old_config = None
    for path in MANAGED_DIRS + MANAGED_FILES + (config_path,):
        try:
            if os.path.isdir(path):
                shutil.rmtree(path)
            elif os.path.exists(path):
                os.remove(path)
        except OSError as e:
            print(f"[ERROR] {e}")
            if not confirm("continue?"):
                return False
    if old_config is not None:
        print("[INFO] Dropping database...")
        Database(old_config.database_path(), old_config.db.options).drop()
    return True


def generate_config(config_path: str) -> SystemConfig:
    defaults = SystemConfig()
    config = SystemConfig(
        db=DatabaseConfig(
            url=ask("Database file", defaults.db.url),
            options=dict(defaults.db.options),
        ),
        redis=RedisConfig(
            host=ask("REDIS database hostname/IP address", defaults.redis.host),
            port=ask_int("REDIS database port", defaults.redis.port, 1, 65535),
            db=ask_int("REDIS database index", defaults.redis.db, 0, 15),
            prefix=ask("REDIS database prefix", defaults.redis.prefix),
        ),
        http=HttpConfig(
            hostname=ask("HTTP Hostname", defaults.http.hostname),
            port=ask_int("HTTP Port", defaults.http.port, 1, 65535),
            https=False,
        ),
        session_secret=ask("session secret", random_secret()),
    )
    save_config(config, config_path)
    # reload so relative database paths resolve against the config location
    return load_config(config_path)


async def initialize_database(config: SystemConfig) -> None:
    context = AppContext.from_config(config)
    context.init()
    try:
        admin = await context.entries.create_entry(
            EntryCreate(
                id=ADMINISTRATOR_ID,
                description="System administrator",
                email=ADMINISTRATOR_EMAIL,
                type=EntryType.user,
                password=read_password(),
            )
        )
        await context.systemmaps.add(admin.id)
    finally:
        context.close()


def cmd_init(args: argparse.Namespace) -> int:
    print("[INFO] Initializing the system...")
    print("[INFO] [STEP 1/3] Checking environment...")
    if os.path.exists(args.config) and not uninstall(args.config):
        return 0
    print("[INFO] [STEP 2/3] Generating config...")
    config = generate_config(args.config)
    print("[INFO] [STEP 3/3] Initializing database...")
    try:
        asyncio.run(initialize_database(config))
    except PerillaError as e:
        print(f"[ERROR] {e.message}")
        return 0
    print("[INFO] Done")
    print("[TIP] use `perilla serve` to start perilla")
    print(f"[TIP] Edit {args.config} to customize perilla.")
    return 0


# ---------------------------------------------------------------------------
# entry
# ---------------------------------------------------------------------------

async def create_entry(context: AppContext, entry_id: str) -> None:
    email = ask("Entry email")
    description = ask("Entry description", "")
    type_answer = ask("Entry type (0: User, 1: Group)", "0")
    if type_answer not in {"0", "1"}:
        raise PerillaError("Invalid entry type")
    entry_type = EntryType(int(type_answer))
    password = read_password() if entry_type == EntryType.user else None
    await context.entries.create_entry(
        EntryCreate(
            id=entry_id,
            email=email or None,
            description=description or None,
            type=entry_type,
            password=password,
        )
    )
    print(f"[INFO] Welcome, {entry_id}.")


async def remove_entry(context: AppContext, entry_id: str) -> None:
    await context.entries.remove_entry(entry_id)
    print(f"[INFO] {entry_id} removed.")


async def modify_entry(context: AppContext, entry_id: str) -> None:
    entry = await context.entries.get_entry(entry_id)
    if entry is None:
        raise EntryNotFound()
    for key in ("id", "description", "email", "created"):
        print(f"{key}\t{getattr(entry, key)}")
    print(f"type\t{entry.type.name}")
    updates = EntryUpdate(
        email=ask("Entry email", entry.email or "") or None,
        description=ask("Entry description", entry.description or "") or None,
    )
    await context.entries.update_entry(entry_id, updates)
    if entry.type == EntryType.user and confirm("Change password"):
        await context.entries.set_password(entry_id, read_password())
    print(f"[INFO] {entry_id} saved.")


async def run_entry_actions(context: AppContext, args: argparse.Namespace) -> None:
    try:
        if args.create:
            await create_entry(context, args.id)
        if args.remove:
            await remove_entry(context, args.id)
        if args.modify:
            await modify_entry(context, args.id)
    finally:
        context.close()


def cmd_entry(args: argparse.Namespace) -> int:
    if not (args.create or args.remove or args.modify):
        print("[ERROR] Nothing to do: pass --create, --remove or --modify")
        return 0
    try:
        context = open_context(args.config)
    except (OSError, ValueError) as e:
        print(f"[ERROR] Cannot load config: {e}")
        return 1
    try:
        asyncio.run(run_entry_actions(context, args))
    except PerillaError as e:
        print(e.message)
    return 0


# ---------------------------------------------------------------------------
# frontend
# ---------------------------------------------------------------------------

def fetch_latest_frontend_tag() -> str:
    response = requests.get(
        FRONTEND_LATEST_URL,
        headers={"Accept": "application/vnd.github+json"},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    tag = response.json().get("tag_name")
    if not tag:
        raise ValueError("Fetch latest frontend version failed")
    print(f"Version {tag} found.")
    return tag


def download_frontend_release(tag: str, target: str) -> None:
    url = FRONTEND_DOWNLOAD_URL.format(tag=tag)
    print("Downloading...")
    response = requests.get(url, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    if os.path.isdir(target):
        shutil.rmtree(target)
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        archive.extractall(target)
    logger.info("Frontend %s extracted to %s", tag, target)


def cmd_frontend(args: argparse.Namespace) -> int:
    if not args.download:
        return 0
    try:
        tag = fetch_latest_frontend_tag()
        download_frontend_release(tag, Settings().frontend_path)
    except (requests.RequestException, ValueError, zipfile.BadZipFile) as e:
        print(str(e))
    return 0


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------

def cmd_serve(args: argparse.Namespace) -> int:
    from uvicorn import Config, Server

    from perilla_api.app.main import create_app

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"[ERROR] Cannot load config: {e}")
        return 1
    settings = Settings()
    app = create_app(config, settings)
    server = Server(
        Config(
            app=app,
            host=config.http.hostname,
            port=config.http.port,
            reload=False,
            log_level=settings.log_level.lower(),
        )
    )
    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="perilla", description="Perilla operator tool")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--config", default=get_config_path(), help="Path to config.json")
    sub = parser.add_subparsers(dest="command")
    sub.required = True

    init = sub.add_parser("init", help="Initialize the system")
    init.set_defaults(func=cmd_init)

    entry = sub.add_parser("entry", help="Entry utils")
    entry.add_argument("id", help="Entry id")
    entry.add_argument("-c", "--create", action="store_true", help="Create entry")
    entry.add_argument("-r", "--remove", action="store_true", help="Delete entry")
    entry.add_argument("-m", "--modify", action="store_true", help="Modify entry")
    entry.set_defaults(func=cmd_entry)

    frontend = sub.add_parser("frontend", help="Frontend utils")
    frontend.add_argument("-d", "--download", action="store_true", help="Download frontend file")
    frontend.set_defaults(func=cmd_frontend)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(os.getenv("LOG_LEVEL", "WARNING"))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
