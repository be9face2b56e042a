"""
run-attest - CI/CD Module

Single-line pipeline output formatting and parsing.
"""

from .outputs import format_output, write_outputs, parse_outputs

__all__ = ['format_output', 'write_outputs', 'parse_outputs']
