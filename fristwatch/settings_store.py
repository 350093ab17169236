"""Runtime-tunable settings stored as JSON in the ``app_settings`` table."""

import json
import logging
from typing import Any, TypeVar

from .clock import Clock
from .database import DatabaseManager, to_db_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SettingsError(Exception):
    """Raised when a stored setting cannot be read or coerced."""


class SettingsStore:
    """Key/value settings with typed reads."""

    def __init__(self, db: DatabaseManager, clock: Clock):
        self.db = db
        self.clock = clock

    def set(self, key: str, value: Any) -> None:
        with self.db.get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO app_settings (key, value, updated_at) "
                "VALUES (?, ?, ?)",
                (key, json.dumps(value), to_db_timestamp(self.clock.now())),
            )

    def get_typed(self, key: str, default: T) -> T:
        """Return the stored value coerced to the type of ``default``.

        A missing key yields ``default``.
        """
        with self.db.get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM app_settings WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            return default

        try:
            value = json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise SettingsError(f"Setting {key!r} is not valid JSON") from exc

        return _coerce(key, value, default)


def _coerce(key: str, value: Any, default: Any) -> Any:
    if default is None or isinstance(value, type(default)):
        # bool is a subclass of int; reject it where an int is expected
        if isinstance(default, int) and not isinstance(default, bool):
            if isinstance(value, bool):
                raise SettingsError(f"Setting {key!r} must be an integer")
        return value

    if isinstance(default, bool):
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise SettingsError(f"Setting {key!r} must be a boolean, got {value!r}")

    try:
        return type(default)(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(
            f"Setting {key!r} cannot be read as {type(default).__name__}"
        ) from exc
