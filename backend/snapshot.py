"""
snapshot.py - the dataset snapshot and the one place legacy check-in values are normalized.

Snapshot layout (also the export/import file format):

    {
        "alice": {
            "password": "<hex digest>",
            "checkins": {"2024-03-01": ["paper", "fitness"]}
        }
    }

Older data may hold a bare string for a day ("2024-03-01": "fitness").
Every store boundary (reads and imports) goes through normalize_activities,
and writes only ever persist the list form.
"""

import re
from datetime import datetime
from typing import Iterable

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator

from errors import InvalidInput

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date(value) -> bool:
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def normalize_activities(value) -> list[str]:
    """
    Coerce a stored day value to the canonical list form.
    A bare code becomes a one-element list, duplicates collapse (first one wins),
    None becomes an empty list. Raises ValueError for anything else.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValueError(f"activities must be a list or a string, got {type(value).__name__}")

    result = []
    for item in items:
        if not isinstance(item, str) or not item:
            raise ValueError("activity codes must be non-empty strings")
        if item not in result:
            result.append(item)
    return result


def normalize_checkins(checkins) -> dict[str, list[str]]:
    """Normalize a whole date → activities mapping. Empty days are dropped, dates sorted."""
    if checkins is None:
        return {}
    if not isinstance(checkins, dict):
        raise ValueError("checkins must be an object keyed by date")

    normalized = {}
    for day in sorted(checkins):
        if not is_valid_date(day):
            raise ValueError(f"'{day}' is not a YYYY-MM-DD date")
        activities = normalize_activities(checkins[day])
        if activities:
            normalized[day] = activities
    return normalized


class SnapshotUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    password: str
    checkins: dict[str, list[str] | str] | None = None

    @field_validator("checkins", mode="after")
    @classmethod
    def _normalize(cls, value):
        return normalize_checkins(value)


_SNAPSHOT_ADAPTER = TypeAdapter(dict[str, SnapshotUser])


def parse_snapshot(data) -> dict[str, dict]:
    """
    Validate and normalize an imported snapshot before any store is touched.
    Raises InvalidInput with a short description of the first problem found.
    """
    if not isinstance(data, dict):
        raise InvalidInput("Snapshot must be a JSON object keyed by username")

    try:
        users = _SNAPSHOT_ADAPTER.validate_python(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ()))
        raise InvalidInput(f"Invalid snapshot at '{where}': {first.get('msg')}") from e

    snapshot = {}
    for username, record in users.items():
        if not username:
            raise InvalidInput("Snapshot contains an empty username")
        snapshot[username] = {"password": record.password, "checkins": record.checkins or {}}
    return snapshot


def build_snapshot(users: Iterable[tuple[str, str]], rows: Iterable[tuple[str, str, str]]) -> dict[str, dict]:
    """
    Assemble the canonical snapshot from account rows and (username, date, activity) rows.
    Usernames and dates come out sorted; activities keep the order the rows arrive in.
    Rows for unknown users are ignored.
    """
    snapshot = {username: {"password": digest, "checkins": {}} for username, digest in sorted(users)}
    for username, day, activity in rows:
        user = snapshot.get(username)
        if user is None:
            continue
        activities = user["checkins"].setdefault(day, [])
        if activity not in activities:
            activities.append(activity)

    for user in snapshot.values():
        user["checkins"] = {day: user["checkins"][day] for day in sorted(user["checkins"])}
    return snapshot


def strip_credentials(snapshot: dict[str, dict]) -> dict[str, dict]:
    """Snapshot view for non-admin clients: check-ins only, no digests."""
    return {username: {"checkins": data["checkins"]} for username, data in snapshot.items()}
