"""
admin_service.py - admin panel: statistics, user inspection, deletion, export/import.
Import is a full replace and goes through parse_snapshot before the store is touched.
"""

import logging

from activities import describe_activities
from errors import NotFound
from services.checkin_service import CheckinService
from services.snapshot_cache import SnapshotCache
from snapshot import parse_snapshot
from stores.base import CheckinStore

logger = logging.getLogger(__name__)


class AdminService:
    @staticmethod
    def stats(store: CheckinStore, today: str | None = None) -> dict:
        today = today or CheckinService.today()
        snapshot = store.export_snapshot()

        total_days = 0
        total_activities = 0
        active_today = 0
        for data in snapshot.values():
            checkins = data["checkins"]
            total_days += len(checkins)
            total_activities += sum(len(a) for a in checkins.values())
            if checkins.get(today):
                active_today += 1

        return {
            "total_users": len(snapshot),
            # days with at least one activity, summed over users
            "total_checkins": total_days,
            "total_activities": total_activities,
            "active_today": active_today,
            "date": today,
        }

    @staticmethod
    def list_users(store: CheckinStore) -> list[dict]:
        snapshot = store.export_snapshot()
        return [
            {
                "username": username,
                "checkin_count": len(data["checkins"]),
                "last_checkin": max(data["checkins"]) if data["checkins"] else None,
            }
            for username, data in snapshot.items()
        ]

    @staticmethod
    def user_detail(store: CheckinStore, username: str) -> dict:
        if store.find_user(username) is None:
            raise NotFound(f"User '{username}' not found")
        checkins = store.get_user_checkins(username)
        history = [
            {"date": day, "activities": checkins[day], "display": describe_activities(checkins[day])}
            for day in sorted(checkins, reverse=True)
        ]
        return {"username": username, "checkin_count": len(checkins), "history": history}

    @staticmethod
    def delete_user(store: CheckinStore, username: str, cache: SnapshotCache | None = None) -> None:
        store.delete_user(username)
        if cache is not None:
            cache.invalidate()

    @staticmethod
    def export(store: CheckinStore) -> dict[str, dict]:
        return store.export_snapshot()

    @staticmethod
    def import_data(store: CheckinStore, data, cache: SnapshotCache | None = None) -> dict:
        """Replace all accounts and check-ins with the given snapshot. {} clears everything."""
        snapshot = parse_snapshot(data)
        try:
            store.import_snapshot(snapshot)
        finally:
            if cache is not None:
                cache.invalidate()
        return {
            "users": len(snapshot),
            "checkins": sum(len(a) for d in snapshot.values() for a in d["checkins"].values()),
        }

    @staticmethod
    def clear_all(store: CheckinStore, cache: SnapshotCache | None = None) -> None:
        AdminService.import_data(store, {}, cache)
        logger.info("All data cleared")
