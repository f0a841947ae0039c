# SPDX-License-Identifier: MIT

import logging
from typing import Any

from stronghabit.migrate import registry

logger = logging.getLogger(__name__)


def migrate_document(document: dict[str, Any]) -> dict[str, Any]:
    """
    Bring a raw storage document up to the latest schema version.

    Documents from an unknown or newer version are passed through unchanged.
    """
    registry.register_migrations()
    migrations = registry.get_migrations()
    latest_version = max(migrations.keys())

    version = document.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        logger.warning("unknown document version %r, restoring as is", version)
        return document
    if version > latest_version:
        logger.warning(
            "document version %d is newer than supported version %d, restoring as is",
            version,
            latest_version,
        )
        return document

    migrations_to_run = sorted(
        [(key, value) for key, value in migrations.items() if key > version],
        key=lambda kvp: kvp[0],
    )

    for migration_id, migration_callable in migrations_to_run:
        logger.info("migrating document to version %d", migration_id)
        document = migration_callable(document)
        document["version"] = migration_id

    return document
