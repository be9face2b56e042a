"""
Pipeline Outputs Module

Formats signing outputs as single-line key/value pairs for a pipeline log,
and reads them back from a captured log.
"""

import re
import sys
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

_SET_OUTPUT = re.compile(r'^::set-output name=([A-Za-z0-9_\-]+)::(.*)$')
_KEY_VALUE = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)=(.*)$')


def format_output(key: str, value: str) -> List[str]:
    """Legacy workflow-command line followed by the plain key=value line."""
    if '\n' in value or '\r' in value:
        raise ValueError(f"Output {key} must be a single line")
    return [
        f"::set-output name={key}::{value}",
        f"{key}={value}"
    ]


def write_outputs(pairs: Iterable[Tuple[str, str]],
                  stream: Optional[TextIO] = None,
                  github_output: Optional[str] = None) -> None:
    """
    Append outputs to the Actions output file, if any, then print them.

    Nothing is printed when the output file cannot be written.

    Args:
        pairs: Ordered key/value pairs
        stream: Where to print; defaults to stdout
        github_output: Path of the file named by GITHUB_OUTPUT

    Raises:
        OSError: If the output file cannot be written
    """
    stream = stream or sys.stdout
    pairs = list(pairs)
    lines = [line for key, value in pairs for line in format_output(key, value)]

    if github_output:
        with open(github_output, 'a', encoding='utf-8') as f:
            f.write(''.join(f"{key}={value}\n" for key, value in pairs))

    for line in lines:
        print(line, file=stream)


def parse_outputs(lines: Iterable[str]) -> Dict[str, str]:
    """
    Collect outputs from a captured pipeline log.

    Both line forms are understood; unrelated log lines are skipped and a
    key seen twice keeps its last value.
    """
    outputs = {}
    for line in lines:
        line = line.rstrip('\r\n')
        match = _SET_OUTPUT.match(line) or _KEY_VALUE.match(line)
        if match:
            outputs[match.group(1)] = match.group(2)
    return outputs
