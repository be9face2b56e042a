"""
Signature Verifier Module

Decides whether a signature over a message was produced by the holder of a
published public key.

Malformed input (bad base64, wrong key container, unreadable message file)
raises. A well-formed signature that does not match is not an error: it is
returned as a rejected VerificationResult.
"""

import base64
import binascii
import enum
import logging
from typing import Dict, Any, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey

from ..errors import DecodeError, InvalidSignatureError
from ..verification.integrity_checker import Digest, Hasher, MODE_AUTO
from .key_manager import PublicKeyCodec, get_key_info

logger = logging.getLogger(__name__)


class VerifierState(enum.Enum):
    START = 'start'
    DECODE_INPUTS = 'decode_inputs'
    PARSE_PUBLIC_KEY = 'parse_public_key'
    RESOLVE_MESSAGE = 'resolve_message'
    COMPUTE_DIGEST = 'compute_digest'
    CHECK_SIGNATURE = 'check_signature'
    ACCEPT = 'accept'
    REJECT = 'reject'


class VerificationResult:
    """Result of a signature verification that ran to a decision."""

    def __init__(self,
                 is_valid: bool,
                 message: str = "",
                 digest: Optional[str] = None,
                 message_source: Optional[str] = None,
                 public_key_info: Optional[Dict[str, Any]] = None):
        self.is_valid = is_valid
        self.message = message
        self.digest = digest
        self.message_source = message_source
        self.public_key_info = public_key_info

    @property
    def state(self) -> VerifierState:
        return VerifierState.ACCEPT if self.is_valid else VerifierState.REJECT

    def raise_for_rejection(self) -> None:
        """Raise InvalidSignatureError if the signature was rejected."""
        if not self.is_valid:
            raise InvalidSignatureError(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert verification result to dictionary."""
        return {
            'is_valid': self.is_valid,
            'state': self.state.value,
            'message': self.message,
            'digest': self.digest,
            'message_source': self.message_source,
            'public_key_info': self.public_key_info
        }


def decode_b64(value: str, what: str) -> bytes:
    """Strict standard base64 decoding."""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Malformed {what} base64: {e}") from e


def verify_digest(public_key: EllipticCurvePublicKey, signature: bytes, digest: Digest) -> bool:
    """
    Check an ECDSA signature over a SHA-256 digest.

    Returns:
        True if the signature matches, False otherwise
    """
    try:
        public_key.verify(
            signature,
            digest.value,
            ec.ECDSA(utils.Prehashed(hashes.SHA256()))
        )
    except InvalidSignature:
        return False
    return True


class SignatureVerifier:
    """Verifies signatures published by a signing run."""

    def __init__(self):
        self.state = VerifierState.START

    def _enter(self, state: VerifierState) -> None:
        logger.debug("Verifier %s -> %s", self.state.value, state.value)
        self.state = state

    def verify(self,
               signature_b64: str,
               public_key_b64: str,
               message: str,
               mode: str = MODE_AUTO) -> VerificationResult:
        """
        Verify a signature over a message.

        Args:
            signature_b64: Base64 DER signature
            public_key_b64: Base64 of the PEM public key
            message: File path or literal message
            mode: Message resolution mode ('auto', 'file' or 'literal')

        Returns:
            VerificationResult in the accept or reject state

        Raises:
            DecodeError: If the signature or public key base64 is malformed
            KeyFormatError: If the public key is not a P-256 PEM public key
            MessageReadError: If the message names a path that cannot be read
        """
        self.state = VerifierState.START

        self._enter(VerifierState.DECODE_INPUTS)
        signature = decode_b64(signature_b64, 'signature')
        public_key_pem = PublicKeyCodec.unwrap(public_key_b64)

        self._enter(VerifierState.PARSE_PUBLIC_KEY)
        public_key = PublicKeyCodec.load_pem(public_key_pem)

        self._enter(VerifierState.RESOLVE_MESSAGE)
        source = Hasher.resolve_message(message, mode)

        # A file that exists but fails to open surfaces here, when it is read
        self._enter(VerifierState.COMPUTE_DIGEST)
        digest = Hasher.digest_of(source)

        self._enter(VerifierState.CHECK_SIGNATURE)
        is_valid = verify_digest(public_key, signature, digest)

        self._enter(VerifierState.ACCEPT if is_valid else VerifierState.REJECT)
        return VerificationResult(
            is_valid=is_valid,
            message="valid signature" if is_valid else "invalid signature",
            digest=digest.hex(),
            message_source=source.kind,
            public_key_info=get_key_info(public_key)
        )
