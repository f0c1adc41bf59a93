"""Encrypted storage of the single state blob."""

from .backend import (
    EncryptedFileStateStore,
    InMemoryStateStore,
    StateFileLock,
    StateStore,
    decode_state,
    encode_state,
)

__all__ = [
    "EncryptedFileStateStore",
    "InMemoryStateStore",
    "StateFileLock",
    "StateStore",
    "decode_state",
    "encode_state",
]
