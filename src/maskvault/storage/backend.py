"""State store backends.

The state is one opaque blob: every save encodes the whole
:class:`~maskvault.identity.models.State`, there are no partial updates.
Stores carry a re-entrant lock that the state manager holds for one full
load → mutate → persist cycle, since the stores themselves have no
transactions.

Backends:
- Memory (tests, embedding hosts)
- Local file encrypted with Fernet
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

from maskvault.core.exceptions import StorageError
from maskvault.identity.models import State

logger = logging.getLogger(__name__)


def encode_state(state: State) -> bytes:
    return json.dumps(state.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")


def decode_state(blob: bytes) -> State:
    try:
        return State.from_dict(json.loads(blob.decode("utf-8")))
    except (UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
        raise StorageError(f"Stored state is corrupt: {e}") from e


class StateStore(Protocol):
    """Abstract encrypted state storage."""

    lock: AbstractContextManager

    def load(self) -> State: ...
    def save(self, state: State) -> None: ...


class InMemoryStateStore:
    """Keeps the encoded state in memory.

    The blob is stored encoded so that loads never share objects with a
    previous request.
    """

    def __init__(self, state: State | None = None) -> None:
        self.lock = threading.RLock()
        self._blob: bytes | None = encode_state(state) if state is not None else None
        self.saves = 0

    def load(self) -> State:
        if self._blob is None:
            return State()
        return decode_state(self._blob)

    def save(self, state: State) -> None:
        self._blob = encode_state(state)
        self.saves += 1


class StateFileLock:
    """Exclusive lock on a sidecar file, shared by every process using a state file.

    Re-entrant within one process: the first ``__enter__`` takes the
    ``flock`` and nested entries only count depth. Threads of one process
    queue on the in-process lock before touching the file lock.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._fd: int | None = None

    def __enter__(self) -> StateFileLock:
        self._thread_lock.acquire()
        try:
            if self._depth == 0:
                self._fd = self._acquire()
            self._depth += 1
        except BaseException:
            self._thread_lock.release()
            raise
        return self

    def __exit__(self, *exc_info: object) -> None:
        try:
            self._depth -= 1
            if self._depth == 0 and self._fd is not None:
                fd, self._fd = self._fd, None
                try:
                    fcntl.flock(fd, fcntl.LOCK_UN)
                finally:
                    os.close(fd)
        finally:
            self._thread_lock.release()

    def _acquire(self) -> int:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT | getattr(os, "O_CLOEXEC", 0), 0o600)
        except OSError as e:
            raise StorageError(f"Cannot open state lock: {e}", path=str(self.path)) from e
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as e:
            os.close(fd)
            raise StorageError(f"Cannot lock state: {e}", path=str(self.path)) from e
        return fd


class EncryptedFileStateStore:
    """Fernet-encrypted state file, replaced atomically on every save.

    ``lock`` is held across processes through ``<path>.lock``, so separate
    hosts (or CLI invocations) sharing one file never interleave cycles.
    """

    def __init__(self, path: str | Path, key: bytes) -> None:
        self.path = Path(path).expanduser()
        self.lock = StateFileLock(self.path.with_name(self.path.name + ".lock"))
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise StorageError(f"Invalid state encryption key: {e}") from e

    @staticmethod
    def generate_key() -> bytes:
        return Fernet.generate_key()

    def load(self) -> State:
        if not self.path.exists():
            logger.debug("No state at %s, starting empty", self.path)
            return State()
        try:
            token = self.path.read_bytes()
        except OSError as e:
            raise StorageError(f"Cannot read state: {e}", path=str(self.path)) from e
        try:
            blob = self._fernet.decrypt(token)
        except InvalidToken as e:
            raise StorageError("State cannot be decrypted (wrong key or tampered file)", path=str(self.path)) from e
        return decode_state(blob)

    def save(self, state: State) -> None:
        token = self._fernet.encrypt(encode_state(state))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(token)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write state: {e}", path=str(self.path)) from e
        logger.debug("State saved to %s", self.path)
