import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass

from errors import NotFound
from snapshot import parse_snapshot


@dataclass(frozen=True)
class Account:
    username: str
    password_digest: str


class CheckinStore(ABC):
    """
    Abstract base class for the durable check-in and account storage.

    The store is the single source of truth. Implementations enforce the
    (username, date, activity) uniqueness themselves and make delete_user and
    import_snapshot all-or-nothing. Every read returns normalized data: each
    day maps to a list of distinct activity codes and empty days never appear.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of this backend (e.g. 'sqlite', 'postgresql', 'json')."""
        ...

    # --- Accounts ---------------------------------------------------------

    @abstractmethod
    def find_user(self, username: str) -> Account | None:
        ...

    @abstractmethod
    def create_user(self, username: str, password_digest: str) -> Account:
        """Raises AlreadyExists if the username is taken."""
        ...

    @abstractmethod
    def delete_user(self, username: str) -> None:
        """
        Remove the account and all of its check-ins in one transaction.
        Raises NotFound if there is no such account.
        """
        ...

    @abstractmethod
    def list_users(self) -> list[str]:
        """Usernames, ascending."""
        ...

    def verify_credential(self, username: str, password_digest: str) -> bool:
        """Compare a pre-digested credential with the stored one. Raises NotFound."""
        account = self.find_user(username)
        if account is None:
            raise NotFound(f"User '{username}' not found")
        return hmac.compare_digest(account.password_digest.encode("utf-8"), password_digest.encode("utf-8"))

    # --- Check-ins --------------------------------------------------------

    @abstractmethod
    def add_checkin(self, username: str, date: str, activity: str) -> None:
        """Raises Conflict if the record already exists, NotFound if the user does not."""
        ...

    @abstractmethod
    def remove_checkin(self, username: str, date: str, activity: str) -> None:
        """Idempotent: removing a missing record is not an error."""
        ...

    @abstractmethod
    def get_user_checkins(self, username: str) -> dict[str, list[str]]:
        """date → activities for one user, dates ascending."""
        ...

    @abstractmethod
    def get_checkins_for_date(self, date: str) -> dict[str, list[str]]:
        """username → activities on one date, usernames ascending."""
        ...

    # --- Snapshot ---------------------------------------------------------

    @abstractmethod
    def export_snapshot(self) -> dict[str, dict]:
        """Fresh read of the whole dataset, never cached."""
        ...

    def import_snapshot(self, snapshot: dict) -> None:
        """
        Replace everything with the given snapshot. Legacy day values are
        normalized first; a malformed snapshot raises InvalidInput.
        On a storage failure nothing changes and TransactionFailure is raised.
        """
        self._replace_all(parse_snapshot(snapshot))

    @abstractmethod
    def _replace_all(self, snapshot: dict[str, dict]) -> None:
        """Atomically swap the whole dataset for an already normalized snapshot."""
        ...

    def create_schema(self) -> None:
        """Prepare tables / files. Safe to call more than once."""
        pass

    def close(self) -> None:
        pass
