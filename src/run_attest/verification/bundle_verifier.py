"""
Bundle Verifier Module

Checks everything a signing run published against the artifact it claims to
describe: the artifact signature, the published digest, the envelope
signature and the digest recorded inside the envelope.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Any, Mapping, Optional, Union

from ..errors import DecodeError
from ..provenance.envelope import Envelope, EnvelopeBuilder
from ..signing.key_manager import PublicKeyCodec
from ..signing.signature_verifier import decode_b64, verify_digest
from .integrity_checker import Hasher, MessageSource, FileSource, LiteralSource

logger = logging.getLogger(__name__)


class BundleVerificationStatus:
    """Outcome of verifying a published bundle."""

    def __init__(self,
                 is_valid: bool,
                 checks_performed: List[str],
                 messages: List[str],
                 envelope: Optional[Envelope] = None):
        self.is_valid = is_valid
        self.checks_performed = checks_performed
        self.messages = messages
        self.envelope = envelope
        self.verified_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert verification status to dictionary format."""
        return {
            'is_valid': self.is_valid,
            'checks_performed': self.checks_performed,
            'messages': self.messages,
            'envelope': self.envelope.to_dict() if self.envelope else None,
            'verified_at': self.verified_at
        }


class BundleVerifier:
    """Verifies a signing run's published outputs against an artifact."""

    def verify_bundle(self,
                      bundle: Union[Mapping[str, str], Any],
                      artifact: Union[MessageSource, str, bytes]) -> BundleVerificationStatus:
        """
        Verify a bundle against an artifact.

        Args:
            bundle: AttestationBundle or mapping of published output keys
            artifact: Artifact path (str), literal bytes or message source

        Returns:
            BundleVerificationStatus; failed checks are listed in messages

        Raises:
            DecodeError: If required outputs are missing or malformed
            KeyFormatError: If the public key is not a P-256 PEM public key
            MessageReadError: If the artifact cannot be read
        """
        if hasattr(bundle, 'to_dict'):
            outputs = bundle.to_dict()
        else:
            outputs = dict(bundle)

        missing = [key for key in ('publickey', 'signature') if not outputs.get(key)]
        if missing:
            raise DecodeError(f"Bundle missing outputs: {', '.join(missing)}")

        if isinstance(artifact, str):
            artifact = FileSource(artifact)
        elif isinstance(artifact, bytes):
            artifact = LiteralSource(artifact)

        public_key = PublicKeyCodec.decode(outputs['publickey'])
        signature = decode_b64(outputs['signature'], 'signature')
        artifact_digest = Hasher.digest_of(artifact)

        checks_performed = ['signature']
        messages = []
        is_valid = True

        if verify_digest(public_key, signature, artifact_digest):
            messages.append("Artifact signature valid")
        else:
            is_valid = False
            messages.append("Artifact signature invalid")

        published_sha = outputs.get('sha256')
        if published_sha:
            checks_performed.append('sha256')
            if published_sha.lower() == artifact_digest.hex():
                messages.append("Published sha256 matches artifact")
            else:
                is_valid = False
                messages.append(
                    f"Published sha256 mismatch: expected {artifact_digest.hex()}, got {published_sha}"
                )

        envelope = None
        environment = outputs.get('environment')
        if environment:
            env_signature_b64 = outputs.get('environment_signature')
            if not env_signature_b64:
                raise DecodeError("Bundle has an environment but no environment_signature")

            checks_performed.append('environment_signature')
            env_signature = decode_b64(env_signature_b64, 'environment signature')
            env_digest = Hasher.digest_of(LiteralSource(environment))
            if verify_digest(public_key, env_signature, env_digest):
                messages.append("Envelope signature valid")
            else:
                is_valid = False
                messages.append("Envelope signature invalid")

            envelope = EnvelopeBuilder.decode(environment)
            checks_performed.append('envelope_artifact_sha')
            if envelope.artifact_sha.lower() == artifact_digest.hex():
                messages.append("Envelope ArtifactSha matches artifact")
            else:
                is_valid = False
                messages.append(
                    f"Envelope ArtifactSha mismatch: expected {artifact_digest.hex()}, got {envelope.artifact_sha}"
                )

        logger.debug("Bundle checks %s -> %s", checks_performed, is_valid)
        return BundleVerificationStatus(
            is_valid=is_valid,
            checks_performed=checks_performed,
            messages=messages,
            envelope=envelope
        )
