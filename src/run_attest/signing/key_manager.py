"""
Key Manager Module

Generates the ephemeral ECDSA key pair used by a single signing run and
encodes its public half for transport over a single-line output channel.

Keys are never written to disk: a KeyPair lives only as long as the
process that created it.
"""

import base64
import binascii
import logging
import re
from typing import Optional

from cryptography.exceptions import InternalError, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey, EllipticCurvePublicKey

from ..errors import EntropyError, KeyFormatError, PublicKeyDecodeError

logger = logging.getLogger(__name__)

CURVE_NAME = 'secp256r1'
PEM_PUBLIC_KEY_TYPE = 'PUBLIC KEY'

_PEM_BEGIN = re.compile(r'-----BEGIN ([A-Z0-9 ]+)-----')


class KeyPair:
    """An ephemeral P-256 key pair owned by one signing run."""

    def __init__(self, private_key: EllipticCurvePrivateKey):
        self.private_key = private_key
        self.public_key = private_key.public_key()

    @property
    def curve(self) -> str:
        return self.private_key.curve.name

    def __repr__(self) -> str:
        # Never expose the private scalar
        return f"KeyPair(curve={self.curve!r})"


class KeyProvider:
    """Generates fresh key pairs from the cryptographically secure source."""

    def __init__(self, curve: Optional[ec.EllipticCurve] = None):
        self.curve = curve or ec.SECP256R1()

    def generate(self) -> KeyPair:
        """
        Generate a new ephemeral key pair.

        Returns:
            KeyPair bound to the configured curve

        Raises:
            EntropyError: If the secure random source is unavailable
        """
        try:
            private_key = ec.generate_private_key(self.curve)
        except InternalError as e:
            raise EntropyError(f"Secure random source unavailable: {e}") from e

        keypair = KeyPair(private_key)
        logger.debug("Generated ephemeral %s key pair", keypair.curve)
        return keypair


class PublicKeyCodec:
    """Encodes public keys as base64(PEM(SPKI)) and decodes them back."""

    @staticmethod
    def encode(public_key: EllipticCurvePublicKey) -> str:
        """
        Encode a public key as a single line of text.

        Args:
            public_key: Public key to encode

        Returns:
            Base64 of the PEM-framed SubjectPublicKeyInfo
        """
        pem_bytes = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        )
        return base64.b64encode(pem_bytes).decode('ascii')

    @classmethod
    def decode(cls, text: str) -> EllipticCurvePublicKey:
        """
        Decode an encoded public key.

        Args:
            text: Base64 of a PEM public key block

        Returns:
            The P-256 public key

        Raises:
            PublicKeyDecodeError: If the outer base64 is malformed
            KeyFormatError: If the PEM block is missing, of the wrong type,
                or holds a key of another algorithm or curve
        """
        return cls.load_pem(cls.unwrap(text))

    @staticmethod
    def unwrap(text: str) -> bytes:
        """Strip the outer base64, returning the PEM bytes."""
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise PublicKeyDecodeError(f"Malformed public key base64: {e}") from e

    @staticmethod
    def load_pem(pem_bytes: bytes) -> EllipticCurvePublicKey:
        """
        Parse a PEM public key block.

        Raises:
            KeyFormatError: If the PEM block is missing, of the wrong type,
                or holds a key of another algorithm or curve
        """
        try:
            pem_text = pem_bytes.decode('ascii')
        except UnicodeDecodeError as e:
            raise KeyFormatError("Public key is not PEM text") from e

        match = _PEM_BEGIN.search(pem_text)
        if match is None:
            raise KeyFormatError("No PEM block found in public key")

        block_type = match.group(1)
        if block_type != PEM_PUBLIC_KEY_TYPE:
            raise KeyFormatError(f"Unsupported public key type: {block_type}")

        try:
            public_key = serialization.load_pem_public_key(pem_bytes)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyFormatError(f"Unable to parse public key: {e}") from e

        if not isinstance(public_key, EllipticCurvePublicKey):
            raise KeyFormatError(f"Unsupported public key format: {type(public_key).__name__}")

        if public_key.curve.name != CURVE_NAME:
            raise KeyFormatError(f"Unsupported curve: {public_key.curve.name}")

        return public_key


def get_key_info(public_key: EllipticCurvePublicKey) -> dict:
    """Describe a public key for verification results and logs."""
    return {
        'type': type(public_key).__name__,
        'algorithm': 'ECDSA',
        'curve': public_key.curve.name,
        'key_size': public_key.curve.key_size
    }
