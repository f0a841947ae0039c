# SPDX-License-Identifier: MIT

import json
import logging
from typing import Optional

import pendulum

from stronghabit import configuration, time
from stronghabit.adapter.key_value import KeyValueStore
from stronghabit.errors import ValidationError, storage_errors

logger = logging.getLogger(__name__)

# UTC-12:00 to UTC+14:00
MIN_TIMEZONE_OFFSET = -12 * 60
MAX_TIMEZONE_OFFSET = 14 * 60


class SettingsRepository:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_timezone_offset(self) -> Optional[int]:
        """Minutes east of UTC, or None to follow the machine's timezone."""
        with storage_errors("Failed to retrieve timezone preference"):
            stored_offset = self.store.get(configuration.TIMEZONE_PREFERENCE_KEY)
        if stored_offset is None:
            return None
        try:
            return int(stored_offset)
        except ValueError:
            logger.warning("ignoring invalid timezone preference %r", stored_offset)
            return None

    def set_timezone_offset(self, offset_minutes: Optional[int]) -> None:
        with storage_errors("Failed to save timezone preference"):
            if offset_minutes is None:
                self.store.remove(configuration.TIMEZONE_PREFERENCE_KEY)
                return
            if not MIN_TIMEZONE_OFFSET <= offset_minutes <= MAX_TIMEZONE_OFFSET:
                raise ValidationError(
                    f"Timezone offset must be between {MIN_TIMEZONE_OFFSET} and {MAX_TIMEZONE_OFFSET} minutes"
                )
            self.store.set(configuration.TIMEZONE_PREFERENCE_KEY, str(offset_minutes))

    def get_notifications_enabled(self) -> bool:
        with storage_errors("Failed to retrieve notification setting"):
            stored_flag = self.store.get(configuration.NOTIFICATIONS_KEY)
        if stored_flag is None:
            return False
        try:
            return bool(json.loads(stored_flag))
        except ValueError:
            logger.warning("ignoring invalid notification setting %r", stored_flag)
            return False

    def set_notifications_enabled(self, enabled: bool) -> None:
        with storage_errors("Failed to save notification setting"):
            self.store.set(configuration.NOTIFICATIONS_KEY, json.dumps(enabled))

    def today(self) -> pendulum.Date:
        return time.today_for_offset(time.now_utc(), self.get_timezone_offset())
