"""
Envelope Module

Builds the provenance envelope that binds a run's identity to an artifact
digest, and serializes it to a canonical byte form for signing.
"""

import base64
import binascii
import json
from typing import Dict, Any, Mapping, Union

from ..config import RunIdentity
from ..errors import DecodeError
from ..verification.integrity_checker import Digest

ENVELOPE_FIELDS = ('RunUrl', 'GitHubSha', 'ArtifactSha', 'VerifierSha')


class Envelope:
    """Provenance record for one signed artifact."""

    def __init__(self,
                 run_url: str,
                 github_sha: str,
                 artifact_sha: str,
                 verifier_sha: str):
        self.run_url = run_url
        self.github_sha = github_sha
        self.artifact_sha = artifact_sha
        self.verifier_sha = verifier_sha

        for name, value in self.to_dict().items():
            if not isinstance(value, str):
                raise TypeError(f"Envelope field {name} must be a string, got {type(value).__name__}")

    def to_dict(self) -> Dict[str, str]:
        """Envelope fields in their fixed order."""
        return {
            'RunUrl': self.run_url,
            'GitHubSha': self.github_sha,
            'ArtifactSha': self.artifact_sha,
            'VerifierSha': self.verifier_sha
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Envelope":
        """Build an envelope from a mapping with the envelope's field names, in any order."""
        return cls(
            run_url=data['RunUrl'],
            github_sha=data['GitHubSha'],
            artifact_sha=data['ArtifactSha'],
            verifier_sha=data['VerifierSha']
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Envelope):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Envelope({self.to_dict()!r})"


class EnvelopeBuilder:
    """Assembles, serializes and encodes provenance envelopes."""

    @staticmethod
    def build(identity: RunIdentity,
              artifact_digest: Union[Digest, str],
              verifier_digest: str = "") -> Envelope:
        """
        Assemble an envelope for an artifact.

        Args:
            identity: Run identity of the signing pipeline
            artifact_digest: Artifact digest, binary or hex
            verifier_digest: Hex digest of the verifying program

        Returns:
            Envelope with hex-encoded digests
        """
        if isinstance(artifact_digest, Digest):
            artifact_digest = artifact_digest.hex()

        return Envelope(
            run_url=identity.run_url,
            github_sha=identity.commit_sha,
            artifact_sha=artifact_digest,
            verifier_sha=verifier_digest
        )

    @staticmethod
    def serialize(envelope: Envelope) -> bytes:
        """Canonical compact JSON, fixed field order."""
        return json.dumps(envelope.to_dict(), separators=(',', ':')).encode('utf-8')

    @classmethod
    def encode(cls, envelope: Envelope) -> str:
        """Base64 of the canonical serialization, as published and signed."""
        return base64.b64encode(cls.serialize(envelope)).decode('ascii')

    @staticmethod
    def decode(text: str) -> Envelope:
        """
        Decode a published envelope.

        Raises:
            DecodeError: If the base64 or JSON is malformed, or fields are
                missing or not strings
        """
        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Malformed envelope base64: {e}") from e

        try:
            data = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Malformed envelope JSON: {e}") from e

        if not isinstance(data, dict):
            raise DecodeError("Envelope must be a JSON object")

        missing = [name for name in ENVELOPE_FIELDS if name not in data]
        if missing:
            raise DecodeError(f"Envelope missing fields: {', '.join(missing)}")

        try:
            return Envelope.from_dict(data)
        except TypeError as e:
            raise DecodeError(str(e)) from e
