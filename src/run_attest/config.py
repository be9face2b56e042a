"""
Run identity configuration.

The envelope builder never reads process state; the pipeline's run identity
is gathered here once and passed in explicitly.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ENV_SERVER_URL = "GITHUB_SERVER_URL"
ENV_REPOSITORY = "GITHUB_REPOSITORY"
ENV_RUN_ID = "GITHUB_RUN_ID"
ENV_COMMIT_SHA = "GITHUB_SHA"
ENV_OUTPUT_FILE = "GITHUB_OUTPUT"


@dataclass(frozen=True)
class RunIdentity:
    """Where and from which commit a signing run executes."""
    server_url: str = ""
    repository: str = ""
    run_id: str = ""
    commit_sha: str = ""

    @property
    def run_url(self) -> str:
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RunIdentity":
        """
        Build the run identity from pipeline environment variables.

        Missing variables become empty strings and are logged as warnings.
        """
        env = os.environ if environ is None else environ

        missing = [
            name for name in (ENV_SERVER_URL, ENV_REPOSITORY, ENV_RUN_ID, ENV_COMMIT_SHA)
            if not env.get(name)
        ]
        if missing:
            logger.warning("Run identity incomplete, missing: %s", ", ".join(missing))

        return cls(
            server_url=env.get(ENV_SERVER_URL, ""),
            repository=env.get(ENV_REPOSITORY, ""),
            run_id=env.get(ENV_RUN_ID, ""),
            commit_sha=env.get(ENV_COMMIT_SHA, ""),
        )
