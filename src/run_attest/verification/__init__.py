"""
run-attest - Verification Module

Digesting of artifacts and messages. Whole-bundle checks live in
verification.bundle_verifier.
"""

from .integrity_checker import Digest, Hasher, FileSource, LiteralSource, self_digest

__all__ = ['Digest', 'Hasher', 'FileSource', 'LiteralSource', 'self_digest']
