"""
Errors Module

Exception taxonomy shared by the signing and verification sides.

Signing-side errors are fatal to a signing run. On the verification side,
malformed input (DecodeError, KeyFormatError, MessageReadError) aborts,
while a well-formed but cryptographically invalid signature is reported as
a normal negative result rather than raised.
"""


class AttestError(Exception):
    """Base class for all run-attest errors."""


class CryptoError(AttestError):
    """A signing operation failed."""


class EntropyError(CryptoError):
    """The secure random source is unavailable."""


class DecodeError(AttestError, ValueError):
    """Base64 or envelope material could not be decoded."""


class KeyFormatError(AttestError, ValueError):
    """Public key container has the wrong PEM type or an unsupported algorithm."""


class PublicKeyDecodeError(DecodeError, KeyFormatError):
    """The outer base64 of an encoded public key is malformed."""


class MessageReadError(AttestError, OSError):
    """A file message or artifact exists but cannot be read."""


class InvalidSignatureError(AttestError):
    """A well-formed signature failed cryptographic verification."""
