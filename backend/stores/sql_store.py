"""
sql_store.py - SQLAlchemy-backed store for SQLite (embedded file) and PostgreSQL.
Uniqueness of (username, date, activity) is enforced by the table constraint;
delete_user and the import run inside a single transaction.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from database import build_session_factory, init_db
from errors import AlreadyExists, Conflict, NotFound, TransactionFailure, TransientStoreError
from models.checkin import Checkin
from models.user import User
from snapshot import build_snapshot
from stores.base import Account, CheckinStore

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError, DisconnectionError)


class SqlStore(CheckinStore):
    """Store backed by the users/checkins tables."""

    def __init__(self, engine=None):
        if engine is None:
            from database import engine as default_engine
            engine = default_engine
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    @property
    def name(self) -> str:
        return self.engine.dialect.name

    def create_schema(self) -> None:
        try:
            init_db(self.engine)
        except TRANSIENT_ERRORS as e:
            logger.error(f"Error during database initialization: {e}")
            raise TransientStoreError() from e

    @contextmanager
    def _session(self):
        db = self._session_factory()
        try:
            yield db
        except TRANSIENT_ERRORS as e:
            db.rollback()
            logger.error(f"Database unavailable: {e}")
            raise TransientStoreError() from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # --- Accounts ---------------------------------------------------------

    def find_user(self, username: str) -> Account | None:
        with self._session() as db:
            user = db.get(User, username)
            if user is None:
                return None
            return Account(user.username, user.password_digest)

    def create_user(self, username: str, password_digest: str) -> Account:
        with self._session() as db:
            if db.get(User, username) is not None:
                raise AlreadyExists(f"Username '{username}' already exists")
            db.add(User(username=username, password_digest=password_digest))
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise AlreadyExists(f"Username '{username}' already exists") from e
        logger.info(f"Created account '{username}'")
        return Account(username, password_digest)

    def delete_user(self, username: str) -> None:
        with self._session() as db:
            if db.get(User, username) is None:
                raise NotFound(f"User '{username}' not found")
            try:
                removed = db.query(Checkin).filter(Checkin.username == username).delete(synchronize_session=False)
                db.query(User).filter(User.username == username).delete(synchronize_session=False)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Rolled back deletion of '{username}': {e}")
                raise TransactionFailure(f"Could not delete user '{username}'") from e
        logger.info(f"Deleted account '{username}' and {removed} check-in(s)")

    def list_users(self) -> list[str]:
        with self._session() as db:
            names = [row.username for row in db.query(User.username).all()]
        return sorted(names)

    # --- Check-ins --------------------------------------------------------

    def add_checkin(self, username: str, date: str, activity: str) -> None:
        with self._session() as db:
            if db.get(User, username) is None:
                raise NotFound(f"User '{username}' not found")

            existing = db.query(Checkin.id).filter_by(username=username, date=date, activity=activity).first()
            if existing:
                raise Conflict()

            db.add(Checkin(username=username, date=date, activity=activity))
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                # the account was deleted in between (foreign key), not a duplicate
                if db.get(User, username) is None:
                    raise NotFound(f"User '{username}' not found") from e
                raise Conflict() from e

    def remove_checkin(self, username: str, date: str, activity: str) -> None:
        with self._session() as db:
            db.query(Checkin).filter_by(username=username, date=date, activity=activity).delete(
                synchronize_session=False
            )
            db.commit()

    def get_user_checkins(self, username: str) -> dict[str, list[str]]:
        with self._session() as db:
            rows = (
                db.query(Checkin.date, Checkin.activity)
                .filter(Checkin.username == username)
                .order_by(Checkin.id)
                .all()
            )
        return _group(rows)

    def get_checkins_for_date(self, date: str) -> dict[str, list[str]]:
        with self._session() as db:
            rows = (
                db.query(Checkin.username, Checkin.activity)
                .filter(Checkin.date == date)
                .order_by(Checkin.id)
                .all()
            )
        return _group(rows)

    # --- Snapshot ---------------------------------------------------------

    def export_snapshot(self) -> dict[str, dict]:
        with self._session() as db:
            users = db.query(User.username, User.password_digest).all()
            rows = db.query(Checkin.username, Checkin.date, Checkin.activity).order_by(Checkin.id).all()
        return build_snapshot(((u.username, u.password_digest) for u in users), rows)

    def _replace_all(self, snapshot: dict[str, dict]) -> None:
        total = 0
        with self._session() as db:
            try:
                db.query(Checkin).delete(synchronize_session=False)
                db.query(User).delete(synchronize_session=False)

                db.add_all(
                    User(username=username, password_digest=data["password"])
                    for username, data in snapshot.items()
                )
                db.flush()

                for username, data in snapshot.items():
                    for day, activities in data["checkins"].items():
                        for activity in activities:
                            db.add(Checkin(username=username, date=day, activity=activity))
                            total += 1
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Import rolled back: {e}")
                raise TransactionFailure("Import failed, existing data was kept") from e
        logger.info(f"Imported {len(snapshot)} user(s) and {total} check-in(s)")

    def close(self) -> None:
        self.engine.dispose()


def _group(rows) -> dict[str, list[str]]:
    """(key, activity) rows → {key: [activity, ...]} with keys sorted."""
    grouped: dict[str, list[str]] = {}
    for key, activity in rows:
        activities = grouped.setdefault(key, [])
        if activity not in activities:
            activities.append(activity)
    return {key: grouped[key] for key in sorted(grouped)}
