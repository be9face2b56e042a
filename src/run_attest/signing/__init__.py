"""
run-attest - Signing Module

Ephemeral key generation, public key transport encoding, digest signing and
signature verification.
"""

from .key_manager import KeyPair, KeyProvider, PublicKeyCodec
from .artifact_signer import ArtifactSigner, AttestationBundle, SignedArtifact, SignedEnvelope, sign
from .signature_verifier import SignatureVerifier, VerificationResult, VerifierState, verify_digest

__all__ = [
    'KeyPair', 'KeyProvider', 'PublicKeyCodec',
    'ArtifactSigner', 'AttestationBundle', 'SignedArtifact', 'SignedEnvelope', 'sign',
    'SignatureVerifier', 'VerificationResult', 'VerifierState', 'verify_digest',
]
