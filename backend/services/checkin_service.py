"""
checkin_service.py - login / auto-registration and daily check-ins
Validates input against the activity catalog, talks to the store,
and drops the snapshot cache after every change.
"""

import calendar
import logging
from datetime import date as date_cls

from activities import describe_activities, is_valid_activity
from errors import AlreadyExists, Conflict, InvalidCredential, InvalidInput
from services.snapshot_cache import SnapshotCache
from snapshot import DATE_FORMAT, is_valid_date
from stores.base import CheckinStore

logger = logging.getLogger(__name__)


def _invalidate(cache: SnapshotCache | None):
    if cache is not None:
        cache.invalidate()


class CheckinService:
    @staticmethod
    def today() -> str:
        """Local wall-clock date of the server. No timezone is recorded with it."""
        return date_cls.today().strftime(DATE_FORMAT)

    @staticmethod
    def _resolve_date(day: str | None) -> str:
        day = day or CheckinService.today()
        if not is_valid_date(day):
            raise InvalidInput(f"'{day}' is not a YYYY-MM-DD date")
        return day

    @staticmethod
    def login(store: CheckinStore, username: str | None, password_digest: str | None,
              cache: SnapshotCache | None = None) -> dict:
        """
        Look the user up; unknown usernames are registered on the spot with the
        supplied digest, known ones must match it. There is no lockout.
        """
        username = (username or "").strip()
        if not username or not password_digest:
            raise InvalidInput("Username and password required")

        if store.find_user(username) is None:
            try:
                store.create_user(username, password_digest)
                _invalidate(cache)
                return {"username": username, "created": True}
            except AlreadyExists:
                # registered by a concurrent request; fall through to the password check
                pass

        if not store.verify_credential(username, password_digest):
            logger.info(f"Rejected login for '{username}'")
            raise InvalidCredential()
        return {"username": username, "created": False}

    @staticmethod
    def add(store: CheckinStore, username: str, activity: str | None, day: str | None = None,
            cache: SnapshotCache | None = None) -> dict:
        if not activity:
            raise InvalidInput("Username, date, and activity required")
        if not is_valid_activity(activity):
            raise InvalidInput(f"Unknown activity '{activity}'")
        day = CheckinService._resolve_date(day)

        store.add_checkin(username, day, activity)
        _invalidate(cache)
        return {"date": day, "activities": store.get_user_checkins(username).get(day, [])}

    @staticmethod
    def remove(store: CheckinStore, username: str, activity: str | None, day: str | None = None,
               cache: SnapshotCache | None = None) -> dict:
        if not activity:
            raise InvalidInput("Username, date, and activity required")
        day = CheckinService._resolve_date(day)

        store.remove_checkin(username, day, activity)
        _invalidate(cache)
        return {"date": day, "activities": store.get_user_checkins(username).get(day, [])}

    @staticmethod
    def toggle(store: CheckinStore, username: str, activity: str | None, day: str | None = None,
               cache: SnapshotCache | None = None) -> dict:
        """Check the activity in if it isn't yet, otherwise take it back."""
        day = CheckinService._resolve_date(day)
        current = store.get_user_checkins(username).get(day, [])
        if activity in current:
            result = CheckinService.remove(store, username, activity, day, cache)
            result["checked"] = False
            return result
        try:
            result = CheckinService.add(store, username, activity, day, cache)
        except Conflict:
            # the same toggle landed twice; the record is there either way
            result = {"date": day, "activities": store.get_user_checkins(username).get(day, [])}
        result["checked"] = True
        return result

    @staticmethod
    def user_checkins(store: CheckinStore, username: str) -> dict[str, list[str]]:
        return store.get_user_checkins(username)

    @staticmethod
    def today_status(store: CheckinStore, username: str) -> dict:
        day = CheckinService.today()
        codes = store.get_user_checkins(username).get(day, [])
        return {
            "date": day,
            "checked_in": bool(codes),
            "activities": codes,
            "display": describe_activities(codes),
        }

    @staticmethod
    def feed(store: CheckinStore, viewer: str | None = None, day: str | None = None) -> dict:
        """Who checked in on a day (today by default), sorted by username."""
        day = CheckinService._resolve_date(day)
        by_user = store.get_checkins_for_date(day)
        entries = [
            {
                "username": username,
                "activities": by_user[username],
                "display": describe_activities(by_user[username]),
                "is_you": username == viewer,
            }
            for username in sorted(by_user)
        ]
        return {"date": day, "entries": entries}

    @staticmethod
    def calendar_month(store: CheckinStore, username: str, year: int, month: int) -> dict:
        """Check-in days of one month plus what a client needs to lay the grid out."""
        if not 1 <= month <= 12 or not 1 <= year <= 9999:
            raise InvalidInput("Year or month out of range")

        prefix = f"{year:04d}-{month:02d}-"
        checkins = store.get_user_checkins(username)
        days = {day: activities for day, activities in checkins.items() if day.startswith(prefix)}

        first_weekday, days_in_month = calendar.monthrange(year, month)
        return {
            "year": year,
            "month": month,
            "month_name": calendar.month_name[month],
            # 0 = Sunday, the first column of the grid
            "first_weekday": (first_weekday + 1) % 7,
            "days_in_month": days_in_month,
            "today": CheckinService.today(),
            "days": days,
        }
