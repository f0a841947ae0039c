# SPDX-License-Identifier: MIT

import importlib
import pkgutil
from copy import deepcopy
from typing import Any, Callable, TypeAlias

DocumentMigration: TypeAlias = Callable[[dict[str, Any]], dict[str, Any]]

MIGRATIONS: dict[int, DocumentMigration] = {}


def migration(version: int) -> Callable[[DocumentMigration], DocumentMigration]:
    """Register a function that upgrades a raw document to `version`."""

    def wrapper(func: DocumentMigration) -> DocumentMigration:
        global MIGRATIONS
        MIGRATIONS[version] = func
        return func

    return wrapper


def __import_all_modules(package_name: str) -> None:
    package = importlib.import_module(package_name)

    for importer, modname, ispkg in pkgutil.iter_modules(package.__path__):
        full_module_name = f"{package_name}.{modname}"
        importlib.import_module(full_module_name)


def register_migrations() -> None:
    __import_all_modules("stronghabit.migrate.migrations")


def get_migrations() -> dict[int, DocumentMigration]:
    global MIGRATIONS
    return deepcopy(MIGRATIONS)


def get_latest_version() -> int:
    register_migrations()
    return max(MIGRATIONS.keys())
