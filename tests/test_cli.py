"""
Test suite for the run-attest command line.
"""

import base64
import logging
import os
import shutil
import tempfile

from click.testing import CliRunner

from run_attest.cicd.outputs import parse_outputs
from run_attest.cli.main import cli
from run_attest.provenance.envelope import EnvelopeBuilder
from run_attest.verification import integrity_checker

PIPELINE_ENV = {
    'GITHUB_SERVER_URL': "https://github.com",
    'GITHUB_REPOSITORY': "octo/app",
    'GITHUB_RUN_ID': "314",
    'GITHUB_SHA': "1a2b3c",
    'GITHUB_OUTPUT': None,
}


class TestCli:
    """Test cases for the click command group."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()
        self.temp_dir = tempfile.mkdtemp()
        self.artifact_path = os.path.join(self.temp_dir, "app.tar.gz")
        with open(self.artifact_path, 'wb') as f:
            f.write(b"tarball bytes")

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def sign(self, *extra, env=None):
        args = ['sign', self.artifact_path, '--verifier-digest', "ff" * 32, *extra]
        result = self.runner.invoke(cli, args, env=env or PIPELINE_ENV)
        assert result.exit_code == 0, result.output
        return result, parse_outputs(result.output.splitlines())

    def test_sign_outputs(self, caplog):
        """Signing prints all five outputs in both forms and logs the verifier digest."""
        with caplog.at_level(logging.INFO, logger="run_attest.cli.main"):
            result, outputs = self.sign()

        assert list(outputs) == ['publickey', 'signature', 'sha256', 'environment', 'environment_signature']
        assert "::set-output name=publickey::" in result.stdout
        assert "Self hash:  " + "ff" * 32 in caplog.text
        assert "Self hash" not in result.stdout
        assert "Starting verifier" not in result.stdout

        envelope = EnvelopeBuilder.decode(outputs['environment'])
        assert envelope.run_url == "https://github.com/octo/app/actions/runs/314"
        assert envelope.github_sha == "1a2b3c"
        assert envelope.artifact_sha == outputs['sha256']

    def test_sign_no_envelope(self):
        """The minimal signer prints only the artifact outputs."""
        _, outputs = self.sign('--no-envelope')

        assert list(outputs) == ['publickey', 'signature', 'sha256']

    def test_sign_github_output(self):
        """Outputs are appended to GITHUB_OUTPUT when it is set."""
        output_file = os.path.join(self.temp_dir, "github_output")
        env = dict(PIPELINE_ENV, GITHUB_OUTPUT=output_file)

        _, outputs = self.sign(env=env)

        with open(output_file) as f:
            written = parse_outputs(f)
        assert written == outputs

    def test_sign_missing_artifact(self):
        """A missing artifact fails the run with no outputs."""
        missing = os.path.join(self.temp_dir, "missing.bin")

        result = self.runner.invoke(cli, ['sign', missing, '--verifier-digest', "00"], env=PIPELINE_ENV)

        assert result.exit_code == 1
        assert "::set-output" not in result.output
        assert "Error:" in result.output

    def test_sign_github_output_unwritable(self):
        """An output file that cannot be written fails the run with no outputs."""
        env = dict(PIPELINE_ENV, GITHUB_OUTPUT=self.temp_dir)

        result = self.runner.invoke(cli, ['sign', self.artifact_path, '--verifier-digest', "00"], env=env)

        assert result.exit_code == 1
        assert "::set-output" not in result.output
        assert "Error:" in result.output
        assert "Traceback" not in result.output

    def test_sign_directory_artifact(self):
        """A directory is not a signable artifact."""
        result = self.runner.invoke(cli, ['sign', self.temp_dir, '--verifier-digest', "00"], env=PIPELINE_ENV)

        assert result.exit_code == 1
        assert "::set-output" not in result.output
        assert "Error:" in result.output

    def test_verify_accept(self):
        """A freshly signed artifact verifies."""
        _, outputs = self.sign()

        result = self.runner.invoke(cli, ['verify', outputs['signature'], outputs['publickey'], self.artifact_path])

        assert result.exit_code == 0
        assert "valid signature" in result.output

    def test_verify_reject(self):
        """A modified artifact is rejected with exit code 1."""
        _, outputs = self.sign()
        with open(self.artifact_path, 'wb') as f:
            f.write(b"tarball byteS")

        result = self.runner.invoke(cli, ['verify', outputs['signature'], outputs['publickey'], self.artifact_path])

        assert result.exit_code == 1
        assert "invalid signature" in result.output

    def test_verify_malformed_key(self):
        """A key of the wrong PEM type aborts with exit code 2."""
        _, outputs = self.sign()
        wrong_type = base64.b64encode(b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n").decode()

        result = self.runner.invoke(cli, ['verify', outputs['signature'], wrong_type, self.artifact_path])

        assert result.exit_code == 2
        assert "Malformed input" in result.output

    def test_verify_malformed_signature(self):
        """Malformed signature base64 aborts with exit code 2."""
        _, outputs = self.sign()

        result = self.runner.invoke(cli, ['verify', 'not*base64', outputs['publickey'], self.artifact_path])

        assert result.exit_code == 2

    def test_verify_unreadable_file(self, monkeypatch):
        """An artifact that exists but cannot be opened aborts with exit code 2."""
        _, outputs = self.sign()

        def denied_open(file_path, *args, **kwargs):
            raise PermissionError(13, "Permission denied", file_path)

        monkeypatch.setattr(integrity_checker, 'open', denied_open, raising=False)

        result = self.runner.invoke(cli, ['verify', outputs['signature'], outputs['publickey'], self.artifact_path])

        assert result.exit_code == 2
        assert "Malformed input" in result.output

    def test_verify_environment_literal(self):
        """The environment output verifies as a literal message."""
        _, outputs = self.sign()

        result = self.runner.invoke(cli, [
            'verify', '--literal', outputs['environment_signature'], outputs['publickey'], outputs['environment']
        ])

        assert result.exit_code == 0

    def test_verify_bundle(self):
        """A captured log verifies against the artifact."""
        sign_result, _ = self.sign()
        log_path = os.path.join(self.temp_dir, "build.log")
        with open(log_path, 'w') as f:
            f.write(sign_result.output)

        result = self.runner.invoke(cli, ['verify-bundle', log_path, self.artifact_path])

        assert result.exit_code == 0, result.output
        assert "Run: https://github.com/octo/app/actions/runs/314" in result.output
        assert "bundle verified" in result.output

    def test_verify_bundle_modified_artifact(self):
        """A modified artifact fails bundle verification."""
        sign_result, _ = self.sign()
        log_path = os.path.join(self.temp_dir, "build.log")
        with open(log_path, 'w') as f:
            f.write(sign_result.output)
        with open(self.artifact_path, 'ab') as f:
            f.write(b"\x00")

        result = self.runner.invoke(cli, ['verify-bundle', log_path, self.artifact_path])

        assert result.exit_code == 1

    def test_verify_bundle_empty_log(self):
        """A log with no outputs is malformed."""
        log_path = os.path.join(self.temp_dir, "empty.log")
        with open(log_path, 'w') as f:
            f.write("nothing here\n")

        result = self.runner.invoke(cli, ['verify-bundle', log_path, self.artifact_path])

        assert result.exit_code == 2
