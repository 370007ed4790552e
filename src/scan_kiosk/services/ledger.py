"""Rolling token ledger.

The ledger owns the token currently advertised on the poster and the set of
tokens that have been redeemed. Two backends implement the same protocol:

* ``FileTokenLedger`` keeps the state in memory behind one lock and mirrors
  it to a JSON document after every mutation.
* ``SqlTokenLedger`` relies on the ``consumed_token`` primary key for
  single-use semantics and on a conditional UPDATE for the pointer.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from scan_kiosk.db.time import ensure_utc, utcnow
from scan_kiosk.models import TOKEN_POINTER_ID, ConsumedToken, TokenPointer
from scan_kiosk.services.errors import StorageError
from scan_kiosk.services.json_store import JsonDocument

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_SEED = 1000
# Largest value a signed 64-bit BIGINT column holds.
MAX_TOKEN = 2**63 - 1
TOKENS_FILE_NAME = "tokens.json"


class TokenLedger(Protocol):
    """Capabilities shared by every ledger backend."""

    def get_current_token(self) -> int:
        """Return the token the poster should advertise."""
        ...

    def consume_token(self, token: int) -> bool:
        """Mark ``token`` consumed; True only for the first caller."""
        ...

    def advance_if_current(self, token: int) -> bool:
        """Move the pointer to ``token + 1`` if ``token`` is the current one."""
        ...

    def get_consumed_at(self, token: int) -> datetime | None:
        """Return when ``token`` was first consumed, if ever."""
        ...


class FileTokenLedger:
    """Ledger held in memory and persisted to ``tokens.json``."""

    def __init__(self, data_dir: Path, seed: int = DEFAULT_TOKEN_SEED) -> None:
        self._doc = JsonDocument(
            Path(data_dir) / TOKENS_FILE_NAME,
            default=lambda: {"current_token": seed, "consumed": {}},
        )
        self._doc.data.setdefault("current_token", seed)
        self._doc.data.setdefault("consumed", {})

    @property
    def path(self) -> Path:
        return self._doc.path

    def get_current_token(self) -> int:
        with self._doc.lock:
            return int(self._doc.data["current_token"])

    def consume_token(self, token: int) -> bool:
        key = str(token)
        with self._doc.lock:
            consumed: dict[str, str] = self._doc.data["consumed"]
            if key in consumed:
                return False
            consumed[key] = utcnow().isoformat()
            try:
                self._doc.save()
            except StorageError:
                del consumed[key]
                raise
            return True

    def advance_if_current(self, token: int) -> bool:
        with self._doc.lock:
            current = int(self._doc.data["current_token"])
            if token != current:
                return False
            self._doc.data["current_token"] = token + 1
            try:
                self._doc.save()
            except StorageError:
                self._doc.data["current_token"] = current
                raise
        logger.debug("Advanced rolling token %d -> %d", token, token + 1)
        return True

    def get_consumed_at(self, token: int) -> datetime | None:
        with self._doc.lock:
            raw = self._doc.data["consumed"].get(str(token))
        if raw is None:
            return None
        return ensure_utc(datetime.fromisoformat(raw))


class SqlTokenLedger:
    """Ledger stored in the ``token_pointer`` and ``consumed_token`` tables.

    Every operation runs one short transaction; no lock is held by this
    process across statements.
    """

    def __init__(self, session_factory: sessionmaker, seed: int = DEFAULT_TOKEN_SEED) -> None:
        self._session_factory = session_factory
        self._seed = seed

    def ensure_seeded(self) -> None:
        """Create the pointer row with the seed value if it is missing."""
        try:
            with self._session_factory.begin() as session:
                if session.get(TokenPointer, TOKEN_POINTER_ID) is None:
                    session.add(TokenPointer(id=TOKEN_POINTER_ID, current_token=self._seed))
        except IntegrityError:
            # Another process seeded the row first.
            return
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot seed token pointer: {exc}") from exc

    def _read_pointer(self, session: Session) -> int | None:
        return session.scalar(
            select(TokenPointer.current_token).where(TokenPointer.id == TOKEN_POINTER_ID)
        )

    def get_current_token(self) -> int:
        try:
            with self._session_factory() as session:
                current = self._read_pointer(session)
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot read token pointer: {exc}") from exc
        if current is None:
            self.ensure_seeded()
            return self._seed
        return int(current)

    def consume_token(self, token: int) -> bool:
        try:
            with self._session_factory.begin() as session:
                session.execute(
                    insert(ConsumedToken).values(token=token, consumed_at=utcnow())
                )
        except IntegrityError:
            return False
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot consume token {token}: {exc}") from exc
        return True

    def advance_if_current(self, token: int) -> bool:
        try:
            with self._session_factory.begin() as session:
                result = session.execute(
                    update(TokenPointer)
                    .where(TokenPointer.id == TOKEN_POINTER_ID)
                    .where(TokenPointer.current_token == token)
                    .values(current_token=token + 1)
                )
                advanced = bool(result.rowcount)
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot advance token pointer: {exc}") from exc
        if advanced:
            logger.debug("Advanced rolling token %d -> %d", token, token + 1)
        return advanced

    def get_consumed_at(self, token: int) -> datetime | None:
        try:
            with self._session_factory() as session:
                consumed_at = session.scalar(
                    select(ConsumedToken.consumed_at).where(ConsumedToken.token == token)
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot read token {token}: {exc}") from exc
        if consumed_at is None:
            return None
        # SQLite hands back naive datetimes.
        return ensure_utc(consumed_at)
