"""
Artifact Signer Module

Signs artifact digests and provenance envelopes with the ephemeral key of a
single signing run, and collects the results into a publishable bundle.
"""

import base64
import logging
from typing import Dict, List, Optional, Tuple, Union

from cryptography.exceptions import InternalError
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey

from ..config import RunIdentity
from ..errors import EntropyError
from ..provenance.envelope import Envelope, EnvelopeBuilder
from ..verification.integrity_checker import Digest, Hasher, MessageSource, FileSource, LiteralSource
from .key_manager import KeyPair, KeyProvider, PublicKeyCodec

logger = logging.getLogger(__name__)


def sign(digest: Digest, private_key: EllipticCurvePrivateKey) -> bytes:
    """
    Sign a SHA-256 digest.

    The nonce is drawn from the secure random source on every call, so two
    signatures over the same digest differ.

    Args:
        digest: Digest to sign
        private_key: Signing key

    Returns:
        ASN.1 DER encoded ECDSA signature

    Raises:
        EntropyError: If the secure random source is unavailable
    """
    try:
        return private_key.sign(
            digest.value,
            ec.ECDSA(utils.Prehashed(hashes.SHA256()))
        )
    except InternalError as e:
        raise EntropyError(f"Signing failed, secure random source unavailable: {e}") from e


class SignedArtifact:
    """Digest and signature of one artifact."""

    def __init__(self, digest: Digest, signature: bytes):
        self.digest = digest
        self.signature = signature

    @property
    def signature_b64(self) -> str:
        return base64.b64encode(self.signature).decode('ascii')


class SignedEnvelope:
    """Encoded envelope and its signature."""

    def __init__(self, envelope: Envelope, encoded: str, signature: bytes):
        self.envelope = envelope
        self.encoded = encoded
        self.signature = signature

    @property
    def signature_b64(self) -> str:
        return base64.b64encode(self.signature).decode('ascii')


class AttestationBundle:
    """Everything a signing run publishes."""

    def __init__(self,
                 public_key: str,
                 signature: str,
                 sha256: str,
                 environment: Optional[str] = None,
                 environment_signature: Optional[str] = None):
        self.public_key = public_key
        self.signature = signature
        self.sha256 = sha256
        self.environment = environment
        self.environment_signature = environment_signature

    @property
    def has_envelope(self) -> bool:
        return self.environment is not None

    def outputs(self) -> List[Tuple[str, str]]:
        """Published key/value pairs, in publication order."""
        pairs = [
            ('publickey', self.public_key),
            ('signature', self.signature),
            ('sha256', self.sha256),
        ]
        if self.has_envelope:
            pairs.append(('environment', self.environment))
            pairs.append(('environment_signature', self.environment_signature))
        return pairs

    def to_dict(self) -> Dict[str, str]:
        return dict(self.outputs())


class ArtifactSigner:
    """Signer bound to one ephemeral key pair."""

    def __init__(self, keypair: Optional[KeyPair] = None):
        """
        Initialize the signer.

        Args:
            keypair: Key pair for this run; a fresh one is generated when omitted

        Raises:
            EntropyError: If a key pair must be generated and the secure
                random source is unavailable
        """
        self.keypair = keypair or KeyProvider().generate()

    @property
    def public_key_b64(self) -> str:
        return PublicKeyCodec.encode(self.keypair.public_key)

    def sign_digest(self, digest: Digest) -> bytes:
        """Sign a digest with the run's private key."""
        return sign(digest, self.keypair.private_key)

    def sign_artifact(self, source: Union[MessageSource, str, bytes]) -> SignedArtifact:
        """
        Digest and sign an artifact.

        Args:
            source: Message source, artifact path (str) or literal bytes

        Returns:
            SignedArtifact
        """
        if isinstance(source, str):
            source = FileSource(source)
        elif isinstance(source, bytes):
            source = LiteralSource(source)

        digest = Hasher.digest_of(source)
        return SignedArtifact(digest=digest, signature=self.sign_digest(digest))

    def sign_envelope(self, envelope: Envelope) -> SignedEnvelope:
        """Sign the base64 form of an envelope, exactly as it is published."""
        encoded = EnvelopeBuilder.encode(envelope)
        digest = Hasher.hash_bytes(encoded.encode('ascii'))
        return SignedEnvelope(envelope=envelope, encoded=encoded, signature=self.sign_digest(digest))

    def attest(self,
               artifact: Union[MessageSource, str, bytes],
               identity: Optional[RunIdentity] = None,
               verifier_digest: str = "") -> AttestationBundle:
        """
        Sign an artifact and, when a run identity is given, its envelope.

        Every step completes before the bundle is returned, so a failure
        never leaves partial output behind.

        Args:
            artifact: Artifact to sign
            identity: Run identity; enables the envelope when provided
            verifier_digest: Hex digest of the verifying program

        Returns:
            AttestationBundle
        """
        signed = self.sign_artifact(artifact)
        logger.debug("Signed artifact with digest %s", signed.digest.hex())

        bundle = AttestationBundle(
            public_key=self.public_key_b64,
            signature=signed.signature_b64,
            sha256=signed.digest.hex()
        )

        if identity is not None:
            envelope = EnvelopeBuilder.build(identity, signed.digest, verifier_digest)
            signed_envelope = self.sign_envelope(envelope)
            bundle.environment = signed_envelope.encoded
            bundle.environment_signature = signed_envelope.signature_b64
            logger.debug("Signed envelope for %s", envelope.run_url)

        return bundle
