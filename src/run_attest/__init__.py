"""
run-attest

Signs build artifacts inside a pipeline with a key generated for that run
alone, and verifies the published signature bundle later using nothing but
the public key, the signature and the message.
"""

from .errors import (
    AttestError,
    CryptoError,
    EntropyError,
    DecodeError,
    KeyFormatError,
    PublicKeyDecodeError,
    MessageReadError,
    InvalidSignatureError,
)
from .config import RunIdentity
from .verification.integrity_checker import Digest, Hasher
from .provenance.envelope import Envelope, EnvelopeBuilder
from .signing import ArtifactSigner, AttestationBundle, KeyProvider, PublicKeyCodec, SignatureVerifier
from .verification.bundle_verifier import BundleVerifier

__version__ = "0.1.0"

__all__ = [
    'AttestError', 'CryptoError', 'EntropyError', 'DecodeError', 'KeyFormatError',
    'PublicKeyDecodeError', 'MessageReadError', 'InvalidSignatureError',
    'RunIdentity', 'Digest', 'Hasher', 'Envelope', 'EnvelopeBuilder',
    'ArtifactSigner', 'AttestationBundle', 'KeyProvider', 'PublicKeyCodec',
    'SignatureVerifier', 'BundleVerifier',
]
