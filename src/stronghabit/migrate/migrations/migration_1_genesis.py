# SPDX-License-Identifier: MIT

from typing import Any

from stronghabit.migrate.registry import migration


@migration(1)
def migrate(document: dict[str, Any]) -> dict[str, Any]:
    # Version 1 is the first schema, documents without a version are already in it
    return document
