#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from lenslocked.config import configure_logging, load_config
from lenslocked.core.errors import ModelError
from lenslocked.infra.models import User
from lenslocked.services.container import Services


def main() -> None:
    config = load_config()
    configure_logging(config)
    services = Services.from_config(config)
    services.auto_migrate()

    name = input("Name: ").strip()
    email = input("Email: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    user = User(name=name, email=email)
    user.password = pw1
    try:
        services.user.create(user)
    except ModelError as exc:
        raise SystemExit(exc.public() if exc.is_public else str(exc))
    finally:
        services.close()
    print(f"OK -> user {user.id} <{user.email}>")


if __name__ == "__main__":
    main()
