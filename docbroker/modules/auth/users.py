"""In-memory user directory.

Accounts come from the AUTH_USERS setting (a JSON list of objects with
id, username, password, name and email). When it is empty the demo
accounts used by the browser client's quick-login buttons are served.
"""

import hmac
import json
from typing import Dict, Iterable, Optional

from ..common.exceptions import ConfigurationError
from .schemas import UserAccount

DEMO_USERS = [
    {"id": 1, "username": "admin", "password": "admin123", "name": "Administrator", "email": "admin@example.com"},
    {"id": 2, "username": "editor", "password": "editor123", "name": "Document Editor", "email": "editor@example.com"},
    {"id": 3, "username": "viewer", "password": "viewer123", "name": "Document Viewer", "email": "viewer@example.com"},
]


class UserDirectory:
    """Looks up accounts by username and checks passwords."""

    def __init__(self, accounts: Iterable[UserAccount]):
        self._accounts: Dict[str, UserAccount] = {account.username: account for account in accounts}

    @classmethod
    def from_setting(cls, raw: str) -> "UserDirectory":
        if not raw or not raw.strip():
            return cls(UserAccount(**entry) for entry in DEMO_USERS)
        try:
            entries = json.loads(raw)
            return cls(UserAccount(**entry) for entry in entries)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"AUTH_USERS is not a valid list of accounts: {e}") from e

    def __len__(self) -> int:
        return len(self._accounts)

    def check(self, username: str, password: str) -> Optional[UserAccount]:
        """Return the account when the password matches, otherwise None."""
        account = self._accounts.get(username)
        if account is None:
            return None
        if not hmac.compare_digest(account.password.encode(), password.encode()):
            return None
        return account
