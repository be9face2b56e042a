"""
Integrity Checker Module

Computes SHA-256 digests of artifacts and messages, and resolves a message
argument as either a file path or a literal string.
"""

import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Union

from ..errors import MessageReadError

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32
CHUNK_SIZE = 8192

MODE_AUTO = 'auto'
MODE_FILE = 'file'
MODE_LITERAL = 'literal'
MESSAGE_MODES = (MODE_AUTO, MODE_FILE, MODE_LITERAL)


@dataclass(frozen=True)
class Digest:
    """A SHA-256 digest over exactly one byte sequence."""
    value: bytes

    def __post_init__(self):
        if len(self.value) != DIGEST_SIZE:
            raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(self.value)}")

    def hex(self) -> str:
        return self.value.hex()

    def __bytes__(self) -> bytes:
        return self.value


class FileSource:
    """Message backed by a file on disk, hashed as a stream."""

    kind = MODE_FILE

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = os.fspath(path)

    def __repr__(self) -> str:
        return f"FileSource({self.path!r})"


class LiteralSource:
    """Message held in memory."""

    kind = MODE_LITERAL

    def __init__(self, data: Union[bytes, str]):
        if isinstance(data, str):
            data = data.encode('utf-8')
        self.data = data

    def __repr__(self) -> str:
        return f"LiteralSource({len(self.data)} bytes)"


MessageSource = Union[FileSource, LiteralSource]


class Hasher:
    """SHA-256 digesting with file-or-literal message resolution."""

    @staticmethod
    def hash_bytes(data: bytes) -> Digest:
        """Digest an in-memory byte string."""
        return Digest(hashlib.sha256(data).digest())

    @staticmethod
    def hash_file(file_path: Union[str, os.PathLike]) -> Digest:
        """
        Digest a file's contents without loading it into memory.

        Args:
            file_path: Path to the file

        Returns:
            Digest of the file contents

        Raises:
            MessageReadError: If the file cannot be opened or read
        """
        hasher = hashlib.sha256()
        try:
            with open(file_path, 'rb') as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    hasher.update(chunk)
        except OSError as e:
            raise MessageReadError(f"Unable to read {os.fspath(file_path)}: {e}") from e

        return Digest(hasher.digest())

    @classmethod
    def digest_of(cls, source: MessageSource) -> Digest:
        """Digest a resolved message source."""
        if isinstance(source, FileSource):
            digest = cls.hash_file(source.path)
        elif isinstance(source, LiteralSource):
            digest = cls.hash_bytes(source.data)
        else:
            raise TypeError(f"Unsupported message source: {type(source).__name__}")

        logger.debug("Digest of %r: %s", source, digest.hex())
        return digest

    @staticmethod
    def resolve_message(argument: str, mode: str = MODE_AUTO) -> MessageSource:
        """
        Decide whether a message argument is a file path or a literal.

        In auto mode an argument that names an existing path is always
        treated as a file, even when the caller meant the literal string.
        Use file or literal mode to remove that ambiguity.

        Args:
            argument: File path or literal message
            mode: 'auto', 'file' or 'literal'

        Returns:
            FileSource or LiteralSource

        Raises:
            MessageReadError: If a path is expected but cannot be read
        """
        if mode not in MESSAGE_MODES:
            raise ValueError(f"Unsupported message mode: {mode}. Supported modes: {list(MESSAGE_MODES)}")

        if mode == MODE_LITERAL:
            return LiteralSource(argument)

        if mode == MODE_FILE or os.path.exists(argument):
            if not os.path.isfile(argument):
                raise MessageReadError(f"Message path is not a readable file: {argument}")
            return FileSource(argument)

        return LiteralSource(argument)

    @classmethod
    def digest_of_message(cls, argument: str, mode: str = MODE_AUTO) -> Digest:
        """Resolve a message argument and digest it."""
        return cls.digest_of(cls.resolve_message(argument, mode))


def self_digest(program_path: Union[str, os.PathLike]) -> str:
    """
    Hex digest of the verifying program itself, for the envelope's VerifierSha.

    Raises:
        MessageReadError: If the program file cannot be read
    """
    return Hasher.hash_file(program_path).hex()
