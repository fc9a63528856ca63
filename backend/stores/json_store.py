"""
json_store.py - the whole dataset as one JSON document on local disk.

The file uses the export format, so a browser-era export can be dropped in as is.
Such files may still hold bare-string day values; they are normalized on every read
and rewritten in list form the next time the document is saved.
Writers are serialized by a process-local lock and each save replaces the file
atomically, so a reader sees either the old or the new document.
"""

import json
import logging
import os
import tempfile
import threading

from errors import (
    AlreadyExists,
    CheckmateError,
    Conflict,
    NotFound,
    TransactionFailure,
    TransientStoreError,
)
from snapshot import normalize_activities
from stores.base import Account, CheckinStore

logger = logging.getLogger(__name__)


class JsonFileStore(CheckinStore):
    """Store backed by a single JSON file."""

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return "json"

    def create_schema(self) -> None:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with self._lock:
            if not os.path.exists(self.path):
                self._save({})
                logger.info(f"Created empty data file at {self.path}")

    # --- file handling ----------------------------------------------------

    def _load(self) -> dict[str, dict]:
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Data file {self.path} is not valid JSON: {e}")
            raise CheckmateError("Stored data could not be read") from e
        except OSError as e:
            logger.error(f"Could not read {self.path}: {e}")
            raise TransientStoreError() from e

        if not isinstance(raw, dict):
            raise CheckmateError("Stored data could not be read")

        data = {}
        try:
            for username, record in raw.items():
                checkins = {}
                for day, value in (record.get("checkins") or {}).items():
                    activities = normalize_activities(value)
                    if activities:
                        checkins[day] = activities
                data[username] = {"password": record.get("password", ""), "checkins": checkins}
        except (AttributeError, ValueError) as e:
            logger.error(f"Data file {self.path} has an unexpected shape: {e}")
            raise CheckmateError("Stored data could not be read") from e
        return data

    def _save(self, data: dict[str, dict]) -> None:
        directory = os.path.dirname(self.path)
        fd, tmp_path = tempfile.mkstemp(prefix=".checkmate-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _write(self, data: dict[str, dict]) -> None:
        try:
            self._save(data)
        except OSError as e:
            logger.error(f"Could not write {self.path}: {e}")
            raise TransientStoreError() from e

    # --- Accounts ---------------------------------------------------------

    def find_user(self, username: str) -> Account | None:
        record = self._load().get(username)
        if record is None:
            return None
        return Account(username, record["password"])

    def create_user(self, username: str, password_digest: str) -> Account:
        with self._lock:
            data = self._load()
            if username in data:
                raise AlreadyExists(f"Username '{username}' already exists")
            data[username] = {"password": password_digest, "checkins": {}}
            self._write(data)
        logger.info(f"Created account '{username}'")
        return Account(username, password_digest)

    def delete_user(self, username: str) -> None:
        with self._lock:
            data = self._load()
            record = data.pop(username, None)
            if record is None:
                raise NotFound(f"User '{username}' not found")
            try:
                self._save(data)
            except OSError as e:
                logger.error(f"Rolled back deletion of '{username}': {e}")
                raise TransactionFailure(f"Could not delete user '{username}'") from e
        logger.info(f"Deleted account '{username}' and {len(record['checkins'])} check-in day(s)")

    def list_users(self) -> list[str]:
        return sorted(self._load())

    # --- Check-ins --------------------------------------------------------

    def add_checkin(self, username: str, date: str, activity: str) -> None:
        with self._lock:
            data = self._load()
            record = data.get(username)
            if record is None:
                raise NotFound(f"User '{username}' not found")
            activities = record["checkins"].setdefault(date, [])
            if activity in activities:
                raise Conflict()
            activities.append(activity)
            self._write(data)

    def remove_checkin(self, username: str, date: str, activity: str) -> None:
        with self._lock:
            data = self._load()
            record = data.get(username)
            if record is None:
                return
            activities = record["checkins"].get(date)
            if not activities or activity not in activities:
                return
            activities.remove(activity)
            if not activities:
                del record["checkins"][date]
            self._write(data)

    def get_user_checkins(self, username: str) -> dict[str, list[str]]:
        record = self._load().get(username)
        if record is None:
            return {}
        checkins = record["checkins"]
        return {day: checkins[day] for day in sorted(checkins)}

    def get_checkins_for_date(self, date: str) -> dict[str, list[str]]:
        data = self._load()
        return {
            username: data[username]["checkins"][date]
            for username in sorted(data)
            if data[username]["checkins"].get(date)
        }

    # --- Snapshot ---------------------------------------------------------

    def export_snapshot(self) -> dict[str, dict]:
        data = self._load()
        return {
            username: {
                "password": data[username]["password"],
                "checkins": {day: data[username]["checkins"][day] for day in sorted(data[username]["checkins"])},
            }
            for username in sorted(data)
        }

    def _replace_all(self, snapshot: dict[str, dict]) -> None:
        document = {
            username: {
                "password": record["password"],
                "checkins": {day: list(activities) for day, activities in record["checkins"].items()},
            }
            for username, record in snapshot.items()
        }
        with self._lock:
            try:
                self._save(document)
            except OSError as e:
                logger.error(f"Import rolled back: {e}")
                raise TransactionFailure("Import failed, existing data was kept") from e
        total = sum(len(a) for r in document.values() for a in r["checkins"].values())
        logger.info(f"Imported {len(document)} user(s) and {total} check-in(s)")
