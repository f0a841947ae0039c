# SPDX-License-Identifier: MIT

import json
import logging
import re
from copy import deepcopy
from typing import Any, Optional

import pendulum

from stronghabit import configuration, time
from stronghabit.adapter.collaborators import ReminderScheduler
from stronghabit.adapter.key_value import KeyValueStore
from stronghabit.errors import (
    NotFoundError,
    StorageReadError,
    ValidationError,
    storage_errors,
)
from stronghabit.migrate import registry
from stronghabit.migrate.migrate import migrate_document
from stronghabit.model.entity_id import EntityId, generate_entity_id
from stronghabit.model.habit import (
    FREQUENCIES,
    CompletionLog,
    Habit,
    HabitInput,
    StorageDocument,
)
from stronghabit.service.streak import calculate_streak

logger = logging.getLogger(__name__)

REMINDER_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
DATA_RETENTION_DAYS = 365


def parse_reminder_time(reminder_time: Optional[str]) -> Optional[tuple[int, int]]:
    if reminder_time is None:
        return None
    match = REMINDER_TIME_PATTERN.match(reminder_time)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def validate_habit_fields(name: Any, frequency: Any) -> None:
    if not isinstance(name, str) or len(name.strip()) == 0:
        raise ValidationError("Habit name is required")
    if frequency not in FREQUENCIES:
        raise ValidationError(
            f"Invalid habit frequency: {frequency}. Valid options: {', '.join(FREQUENCIES)}"
        )


class HabitRepository:
    """
    Owns the single document holding every habit.

    Each mutation reads the whole document, changes it in memory and writes it
    back with one `set` call. There is no locking: when two mutations
    interleave, the later write wins for the whole document.
    """

    def __init__(self, store: KeyValueStore, reminders: ReminderScheduler) -> None:
        self.store = store
        self.reminders = reminders

    def __read_document(self) -> Optional[StorageDocument]:
        serialized = self.store.get(configuration.HABITS_KEY)
        if serialized is None:
            return None
        try:
            raw_document = json.loads(serialized)
            return self.__convert_document_for_deserialization(raw_document)
        except (ValueError, KeyError, TypeError, AttributeError) as error:
            logger.error("stored habit data could not be parsed: %s", error)
            raise StorageReadError("Stored habit data is corrupted") from error

    def __load_document(self) -> StorageDocument:
        document = self.__read_document()
        if document is None:
            return self.__get_empty_document()
        return document

    def __save_document(self, document: StorageDocument) -> None:
        document["last_updated"] = time.now_utc()
        serializable_document = self.__convert_document_for_serialization(
            deepcopy(document)
        )
        self.store.set(configuration.HABITS_KEY, json.dumps(serializable_document))

    def __get_empty_document(self) -> StorageDocument:
        return {
            "habits": [],
            "last_updated": time.now_utc(),
            "version": registry.get_latest_version(),
        }

    def __convert_document_for_serialization(
        self, document: StorageDocument
    ) -> dict[str, Any]:
        return {
            "habits": [
                self.__convert_habit_for_serialization(habit)
                for habit in document["habits"]
            ],
            "lastUpdated": time.datetime_to_iso_str(document["last_updated"]),
            "version": document["version"],
        }

    def __convert_document_for_deserialization(
        self, raw_document: dict[str, Any]
    ) -> StorageDocument:
        if not isinstance(raw_document.get("habits"), list):
            raise TypeError("document has no habits array")
        last_updated = raw_document.get("lastUpdated")
        return {
            "habits": [
                self.__convert_habit_for_deserialization(raw_habit)
                for raw_habit in raw_document["habits"]
            ],
            "last_updated": time.datetime_from_str(last_updated)
            if last_updated is not None
            else time.now_utc(),
            "version": raw_document.get("version", 1),
        }

    def __convert_habit_for_serialization(self, habit: Habit) -> dict[str, Any]:
        serializable_habit: dict[str, Any] = {
            "id": habit["id"],
            "name": habit["name"],
            "description": habit["description"],
            "frequency": habit["frequency"],
            "selectedDays": habit["selected_days"],
            "color": habit["color"],
            "createdAt": time.datetime_to_iso_str(habit["created_at"]),
            "updatedAt": time.datetime_to_iso_str(habit["updated_at"]),
            "archivedAt": time.datetime_to_iso_str_optional(habit["archived_at"]),
            "reminderEnabled": habit["reminder_enabled"],
            "reminderTime": habit["reminder_time"],
            "notificationId": habit["notification_id"],
            "streak": habit["streak"],
            "completionLogs": [
                {"date": time.day_to_str(log["date"]), "completed": log["completed"]}
                for log in habit["completion_logs"]
            ],
        }
        # Unset optional fields are omitted
        return {key: value for key, value in serializable_habit.items() if value is not None}

    def __convert_habit_for_deserialization(self, raw_habit: dict[str, Any]) -> Habit:
        created_at = time.datetime_from_str(raw_habit["createdAt"])
        updated_at = time.datetime_from_str_optional(raw_habit.get("updatedAt"))
        completion_logs: list[CompletionLog] = [
            {"date": time.day_from_str(raw_log["date"]), "completed": bool(raw_log["completed"])}
            for raw_log in raw_habit["completionLogs"]
        ]
        return {
            "id": raw_habit["id"],
            "name": raw_habit["name"],
            "description": raw_habit.get("description"),
            "frequency": raw_habit["frequency"],
            "selected_days": list(raw_habit.get("selectedDays") or []),
            "color": raw_habit.get("color"),
            "created_at": created_at,
            "updated_at": updated_at if updated_at is not None else created_at,
            "archived_at": time.datetime_from_str_optional(raw_habit.get("archivedAt")),
            "reminder_enabled": bool(raw_habit.get("reminderEnabled", False)),
            "reminder_time": raw_habit.get("reminderTime"),
            "notification_id": raw_habit.get("notificationId"),
            "streak": int(raw_habit.get("streak", 0)),
            "completion_logs": completion_logs,
        }

    def __schedule_reminder(self, habit: Habit) -> Optional[str]:
        if not habit["reminder_enabled"]:
            return None
        reminder_time = parse_reminder_time(habit["reminder_time"])
        if reminder_time is None:
            logger.warning(
                "habit %s has an invalid reminder time %r, no reminder scheduled",
                habit["id"],
                habit["reminder_time"],
            )
            return None
        hour, minute = reminder_time
        try:
            return self.reminders.schedule(
                habit["id"],
                f"Time for {habit['name']}",
                habit["description"] or "Keep your streak going!",
                hour,
                minute,
            )
        except Exception:
            logger.warning(
                "failed to schedule reminder for habit %s", habit["id"], exc_info=True
            )
            return None

    def __cancel_reminder(self, notification_id: Optional[str]) -> None:
        if notification_id is None:
            return
        try:
            self.reminders.cancel(notification_id)
        except Exception:
            logger.warning(
                "failed to cancel reminder %s", notification_id, exc_info=True
            )

    def __find_habit_index(self, document: StorageDocument, id: EntityId) -> int:
        for index, habit in enumerate(document["habits"]):
            if habit["id"] == id:
                return index
        raise NotFoundError(f"Habit not found: {id}")

    def initialize(self) -> None:
        with storage_errors("Failed to initialize storage"):
            if self.store.get(configuration.HABITS_KEY) is None:
                self.__save_document(self.__get_empty_document())

    def get_habits(self) -> list[Habit]:
        with storage_errors("Failed to retrieve habits"):
            document = self.__read_document()
            if document is None:
                return []
            return document["habits"]

    def get_habit(self, id: EntityId) -> Habit:
        habits = self.get_habits()
        for habit in habits:
            if habit["id"] == id:
                return habit
        raise NotFoundError(f"Habit not found: {id}")

    def add_habit(self, habit_input: HabitInput) -> Habit:
        validate_habit_fields(habit_input.get("name"), habit_input.get("frequency"))

        with storage_errors("Failed to add new habit"):
            document = self.__load_document()

            now = time.now_utc()
            habit: Habit = {
                "id": generate_entity_id(),
                "name": habit_input["name"].strip(),
                "description": habit_input.get("description"),
                "frequency": habit_input["frequency"],  # type: ignore[typeddict-item]
                "selected_days": list(habit_input.get("selected_days") or []),
                "color": habit_input.get("color"),
                "created_at": now,
                "updated_at": now,
                "archived_at": None,
                "reminder_enabled": habit_input.get("reminder_enabled", False),
                "reminder_time": habit_input.get("reminder_time"),
                "notification_id": None,
                "streak": 0,
                "completion_logs": [],
            }
            habit["notification_id"] = self.__schedule_reminder(habit)

            document["habits"].append(habit)
            self.__save_document(document)
            logger.info("added habit %s: %s", habit["id"], habit["name"])

            return deepcopy(habit)

    def update_habit(self, habit: Habit) -> None:
        validate_habit_fields(habit.get("name"), habit.get("frequency"))
        days = [log["date"] for log in habit["completion_logs"]]
        if len(days) != len(set(days)):
            raise ValidationError("A habit can have only one completion log per day")

        with storage_errors("Failed to update habit"):
            document = self.__load_document()
            index = self.__find_habit_index(document, habit["id"])
            previous = document["habits"][index]

            self.__cancel_reminder(previous["notification_id"])

            updated = deepcopy(habit)
            updated["created_at"] = previous["created_at"]
            updated["updated_at"] = time.now_utc()
            updated["streak"] = calculate_streak(updated["completion_logs"])
            updated["notification_id"] = self.__schedule_reminder(updated)

            document["habits"][index] = updated
            self.__save_document(document)
            logger.info("updated habit %s", habit["id"])

    def delete_habit(self, id: EntityId) -> None:
        with storage_errors("Failed to delete habit"):
            document = self.__load_document()
            for habit in document["habits"]:
                if habit["id"] == id:
                    self.__cancel_reminder(habit["notification_id"])
            document["habits"] = [
                habit for habit in document["habits"] if habit["id"] != id
            ]
            self.__save_document(document)
            logger.info("deleted habit %s", id)

    def update_habit_completion(
        self, habit_id: EntityId, day: pendulum.Date | str, completed: bool
    ) -> None:
        if isinstance(day, str):
            try:
                day = time.day_from_str(day)
            except ValueError as error:
                raise ValidationError(f"Invalid day: {day}") from error

        with storage_errors("Failed to update habit completion"):
            document = self.__load_document()
            index = self.__find_habit_index(document, habit_id)
            habit = document["habits"][index]

            existing_logs = [log for log in habit["completion_logs"] if log["date"] == day]
            if len(existing_logs) > 0:
                existing_logs[0]["completed"] = completed
            else:
                habit["completion_logs"].append({"date": day, "completed": completed})

            habit["streak"] = calculate_streak(habit["completion_logs"])
            habit["updated_at"] = time.now_utc()

            self.__save_document(document)
            logger.info(
                "marked habit %s %s on %s",
                habit_id,
                "completed" if completed else "not completed",
                time.day_to_str(day),
            )

    def cleanup_old_data(self) -> None:
        with storage_errors("Failed to clean up old data"):
            document = self.__load_document()
            cutoff = time.now_utc().subtract(days=DATA_RETENTION_DAYS)
            cutoff_day = cutoff.date()

            surviving_habits = [
                habit for habit in document["habits"] if habit["created_at"] >= cutoff
            ]
            for habit in surviving_habits:
                habit["completion_logs"] = [
                    log for log in habit["completion_logs"] if log["date"] >= cutoff_day
                ]
                habit["streak"] = calculate_streak(habit["completion_logs"])

            removed = len(document["habits"]) - len(surviving_habits)
            document["habits"] = surviving_habits
            self.__save_document(document)
            logger.info("cleaned up old data, removed %d habits", removed)

    def restore_data(self, serialized_document: str) -> bool:
        """
        Replace the stored document with a serialized one.

        The document is validated first; the stored data is left untouched if
        validation fails.
        """
        try:
            raw_document = json.loads(serialized_document)
        except ValueError as error:
            raise ValidationError("Backup data is not valid JSON") from error

        self.__validate_raw_document(raw_document)
        raw_document = migrate_document(raw_document)

        for raw_habit in raw_document["habits"]:
            raw_habit["streak"] = calculate_streak(
                [
                    {
                        "date": time.day_from_str(raw_log["date"]),
                        "completed": raw_log["completed"],
                    }
                    for raw_log in raw_habit["completionLogs"]
                ]
            )

        with storage_errors("Failed to restore data"):
            self.store.set(configuration.HABITS_KEY, json.dumps(raw_document))
            logger.info("restored %d habits", len(raw_document["habits"]))

        return True

    def __validate_raw_document(self, raw_document: Any) -> None:
        if not isinstance(raw_document, dict):
            raise ValidationError("Invalid data format: document is not an object")
        if not isinstance(raw_document.get("habits"), list):
            raise ValidationError("Invalid data format: habits array is missing")
        if raw_document.get("lastUpdated") is not None:
            self.__validate_raw_timestamp(raw_document["lastUpdated"], "lastUpdated")

        seen_ids: set[str] = set()
        for position, raw_habit in enumerate(raw_document["habits"]):
            if not isinstance(raw_habit, dict):
                raise ValidationError(f"Invalid habit at position {position}")
            for field in ("id", "name", "frequency", "createdAt"):
                if not isinstance(raw_habit.get(field), str) or raw_habit[field] == "":
                    raise ValidationError(
                        f"Invalid habit at position {position}: missing {field}"
                    )
            if raw_habit["frequency"] not in FREQUENCIES:
                raise ValidationError(
                    f"Invalid habit {raw_habit['id']}: unknown frequency {raw_habit['frequency']}"
                )
            for field in ("createdAt", "updatedAt", "archivedAt"):
                if raw_habit.get(field) is not None:
                    self.__validate_raw_timestamp(
                        raw_habit[field], f"habit {raw_habit['id']} {field}"
                    )
            if not isinstance(raw_habit.get("completionLogs"), list):
                raise ValidationError(
                    f"Invalid habit {raw_habit['id']}: completionLogs must be an array"
                )
            if raw_habit["id"] in seen_ids:
                raise ValidationError(f"Duplicate habit id: {raw_habit['id']}")
            seen_ids.add(raw_habit["id"])

            self.__validate_raw_logs(raw_habit["id"], raw_habit["completionLogs"])

    def __validate_raw_timestamp(self, value: Any, label: str) -> None:
        if not isinstance(value, str):
            raise ValidationError(f"Invalid timestamp for {label}")
        try:
            time.datetime_from_str(value)
        except ValueError as error:
            raise ValidationError(f"Invalid timestamp for {label}: {value}") from error

    def __validate_raw_logs(self, habit_id: str, raw_logs: list[Any]) -> None:
        seen_days: set[pendulum.Date] = set()
        for raw_log in raw_logs:
            if (
                not isinstance(raw_log, dict)
                or not isinstance(raw_log.get("date"), str)
                or not isinstance(raw_log.get("completed"), bool)
            ):
                raise ValidationError(f"Invalid completion log in habit {habit_id}")
            try:
                day = time.day_from_str(raw_log["date"])
            except ValueError as error:
                raise ValidationError(
                    f"Invalid completion log date in habit {habit_id}: {raw_log['date']}"
                ) from error
            if day in seen_days:
                raise ValidationError(
                    f"Duplicate completion log for {time.day_to_str(day)} in habit {habit_id}"
                )
            seen_days.add(day)
