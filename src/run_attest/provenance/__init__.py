"""
run-attest - Provenance Module

Provenance envelopes binding a pipeline run to the artifact it signed.
"""

from .envelope import Envelope, EnvelopeBuilder

__all__ = ['Envelope', 'EnvelopeBuilder']
