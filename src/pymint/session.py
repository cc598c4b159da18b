"""In-memory session state for one client instance."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    access_token: str
    user_id: str


class SessionState:
    """Holds the access token and user id obtained by ``authorize``.

    Both values live in one immutable Credentials object that is swapped in
    with a single assignment, so a reader sees either the previous pair or
    the new one, never a mix. Nothing clears the session implicitly.
    """

    def __init__(self) -> None:
        self._credentials: Credentials | None = None

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def access_token(self) -> str | None:
        credentials = self._credentials
        return credentials.access_token if credentials else None

    @property
    def user_id(self) -> str | None:
        credentials = self._credentials
        return credentials.user_id if credentials else None

    @property
    def is_authenticated(self) -> bool:
        return self._credentials is not None

    def update(self, access_token: str, user_id: str) -> Credentials:
        credentials = Credentials(access_token=access_token, user_id=user_id)
        self._credentials = credentials
        return credentials
