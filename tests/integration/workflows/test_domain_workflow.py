"""
Integration tests for the complete domain mapping workflow.

Drives the CLI entry point end to end with scripted console input and a
fake gcloud binary behind subprocess.run.
"""

import json
from typing import List
from unittest.mock import Mock, patch

import pytest


ALLOCATED_IP = "34.117.20.30"


class FakeGcloud:
    """Records gcloud invocations and answers describe calls."""

    def __init__(self, proxy_certificates: List[str] = None, fail_on: List[str] = None):
        self.commands: List[List[str]] = []
        self.proxy_certificates = ["A", "B"] if proxy_certificates is None else proxy_certificates
        self.fail_on = fail_on

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        result = Mock(returncode=0, stdout="", stderr="")

        if self.fail_on and cmd[2:4] == self.fail_on:
            result.returncode = 1
            result.stderr = "ERROR: (gcloud) Quota exceeded"
        elif cmd[1:3] == ["auth", "list"]:
            result.stdout = json.dumps([{"account": "ops@example.com", "status": "ACTIVE"}])
        elif cmd[2:4] == ["addresses", "describe"]:
            result.stdout = f"{ALLOCATED_IP}\n"
        elif cmd[2:4] == ["target-https-proxies", "describe"]:
            result.stdout = json.dumps({
                "name": "custom-domains-sgtm-proxy",
                "sslCertificates": [
                    f"https://www.googleapis.com/compute/v1/projects/test-project/global/sslCertificates/{name}"
                    for name in self.proxy_certificates
                ],
            })
        return result

    @property
    def compute_operations(self) -> List[List[str]]:
        return [cmd[2:4] for cmd in self.commands if cmd[1] == "compute"]

    def find(self, resource: str, verb: str) -> List[str]:
        return next(cmd for cmd in self.commands if cmd[2:4] == [resource, verb])


def run_cli(argv, answers, fake_gcloud):
    from domain_lb.main import run

    with patch("domain_lb.core.gcloud_client.subprocess.run", side_effect=fake_gcloud), \
            patch("builtins.input", side_effect=answers):
        return run(argv)


class TestCreateWorkflow:
    """Tests for creating a new load balancer end to end."""

    @pytest.mark.integration
    def test_create_new_load_balancer(self, capsys):
        fake_gcloud = FakeGcloud()
        answers = ["api.foo.com", "foo-backend", "us-central1", "yes", "1"]

        exit_code = run_cli(["--project", "test-project"], answers, fake_gcloud)

        assert exit_code == 0
        assert fake_gcloud.commands[0][1:3] == ["auth", "list"]
        assert fake_gcloud.compute_operations == [
            ["addresses", "create"],
            ["addresses", "describe"],
            ["ssl-certificates", "create"],
            ["network-endpoint-groups", "create"],
            ["backend-services", "create"],
            ["backend-services", "add-backend"],
            ["url-maps", "create"],
            ["url-maps", "add-path-matcher"],
            ["target-https-proxies", "create"],
            ["forwarding-rules", "create"],
        ]
        assert all(
            cmd[-2:] == ["--project", "test-project"]
            for cmd in fake_gcloud.commands if cmd[1] == "compute"
        )
        assert f"--address={ALLOCATED_IP}" in fake_gcloud.find("forwarding-rules", "create")

        output = capsys.readouterr().out
        assert "Global IP address: " in output
        assert ALLOCATED_IP in output
        assert "api.foo.com" in output

    @pytest.mark.integration
    def test_command_line_inputs(self, capsys):
        fake_gcloud = FakeGcloud()
        argv = [
            "--subdomain", "data.example.com",
            "--service", "sgtm-server-eu-prod",
            "--region", "europe-west4",
            "--plan", "create",
            "--skip-auth-check",
        ]

        exit_code = run_cli(argv, ["yes"], fake_gcloud)

        assert exit_code == 0
        assert fake_gcloud.commands[0][1:4] == ["compute", "addresses", "create"]
        assert "--domains=data.example.com" in fake_gcloud.find("ssl-certificates", "create")
        assert fake_gcloud.find("ssl-certificates", "create")[4] == "cd-data-example-com-cert"
        assert fake_gcloud.find("backend-services", "create")[4] == "cd-data-example-com"

    @pytest.mark.integration
    def test_gcloud_failure_stops_workflow(self, capsys):
        fake_gcloud = FakeGcloud(fail_on=["backend-services", "create"])
        answers = ["api.foo.com", "foo-backend", "us-central1", "yes", "1"]

        exit_code = run_cli(["--skip-auth-check"], answers, fake_gcloud)

        assert exit_code == 1
        assert fake_gcloud.compute_operations[-1] == ["backend-services", "create"]
        assert len(fake_gcloud.compute_operations) == 5
        assert "gcloud command failed" in capsys.readouterr().out


class TestExtendWorkflow:
    """Tests for adding a domain to an existing load balancer."""

    @pytest.mark.integration
    def test_add_domain_keeps_existing_certificates(self, capsys):
        fake_gcloud = FakeGcloud(proxy_certificates=["A", "B"])
        answers = ["api.foo.com", "foo-backend", "us-central1", "yes", "2"]

        exit_code = run_cli(["--skip-auth-check"], answers, fake_gcloud)

        assert exit_code == 0
        assert fake_gcloud.compute_operations == [
            ["addresses", "describe"],
            ["ssl-certificates", "create"],
            ["network-endpoint-groups", "create"],
            ["backend-services", "create"],
            ["backend-services", "add-backend"],
            ["url-maps", "add-path-matcher"],
            ["target-https-proxies", "describe"],
            ["target-https-proxies", "update"],
        ]
        update = fake_gcloud.find("target-https-proxies", "update")
        assert "--ssl-certificates=A,B,cd-api-foo-com-cert" in update

        output = capsys.readouterr().out
        assert "Adding finished" in output
        assert ALLOCATED_IP in output

    @pytest.mark.integration
    def test_proxy_without_certificates_is_fatal(self, capsys):
        fake_gcloud = FakeGcloud(proxy_certificates=[])
        answers = ["api.foo.com", "foo-backend", "us-central1", "yes", "2"]

        exit_code = run_cli(["--skip-auth-check"], answers, fake_gcloud)

        assert exit_code == 1
        assert ["target-https-proxies", "update"] not in fake_gcloud.compute_operations
        output = capsys.readouterr().out
        assert "No existing certificates found on the proxy" in output
        assert "Add this IP address" not in output


class TestAbortAndStartup:
    """Tests for operator aborts and startup failures."""

    @pytest.mark.integration
    def test_no_at_confirmation_exits_without_changes(self, capsys):
        fake_gcloud = FakeGcloud()
        answers = ["api.foo.com", "foo-backend", "us-central1", "no"]

        exit_code = run_cli([], answers, fake_gcloud)

        assert exit_code == 130
        assert fake_gcloud.compute_operations == []
        assert "Add this IP address" not in capsys.readouterr().out

    @pytest.mark.integration
    def test_quit_at_menu(self):
        fake_gcloud = FakeGcloud()
        answers = ["api.foo.com", "foo-backend", "us-central1", "yes", "Q"]

        assert run_cli([], answers, fake_gcloud) == 130
        assert fake_gcloud.compute_operations == []

    @pytest.mark.integration
    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
    def test_interrupted_prompt(self, interrupt):
        fake_gcloud = FakeGcloud()

        assert run_cli(["--skip-auth-check"], interrupt, fake_gcloud) == 130
        assert fake_gcloud.commands == []

    @pytest.mark.integration
    def test_unauthenticated_gcloud(self, capsys):
        from domain_lb.main import run

        result = Mock(returncode=0, stdout="[]", stderr="")
        with patch("domain_lb.core.gcloud_client.subprocess.run", return_value=result), \
                patch("builtins.input") as mock_input:
            exit_code = run([])

        assert exit_code == 1
        mock_input.assert_not_called()
        assert "gcloud auth login" in capsys.readouterr().out

    @pytest.mark.integration
    def test_dry_run_makes_no_calls(self, capsys):
        answers = ["api.foo.com", "foo-backend", "us-central1", "yes", "1"]
        with patch("domain_lb.core.gcloud_client.subprocess.run") as mock_run, \
                patch("builtins.input", side_effect=answers):
            from domain_lb.main import run

            exit_code = run(["--dry-run"])

        assert exit_code == 0
        mock_run.assert_not_called()
        output = capsys.readouterr().out
        assert "[DRY RUN MODE - No changes will be made]" in output
        assert "[10/10] Forwarding rule" in output

    @pytest.mark.integration
    def test_missing_env_file(self, tmp_path, capsys):
        from domain_lb.main import run

        exit_code = run(["--env-file", str(tmp_path / "missing.env")])

        assert exit_code == 1
        assert "Environment file not found" in capsys.readouterr().out

    @pytest.mark.integration
    def test_env_file_sets_project(self, tmp_path, monkeypatch):
        env_file = tmp_path / "lb.env"
        env_file.write_text("GCP_PROJECT_ID=env-project\n")
        # load_dotenv writes into os.environ; monkeypatch restores the variable afterwards
        monkeypatch.setenv("GCP_PROJECT_ID", "placeholder")

        fake_gcloud = FakeGcloud()
        argv = [
            "--env-file", str(env_file),
            "--subdomain", "api.foo.com",
            "--service", "foo-backend",
            "--region", "us-central1",
            "--plan", "create",
            "--skip-auth-check",
        ]

        assert run_cli(argv, ["yes"], fake_gcloud) == 0
        assert fake_gcloud.commands[0][-2:] == ["--project", "env-project"]

    @pytest.mark.integration
    def test_invalid_log_level_in_environment(self, monkeypatch, capsys):
        from domain_lb.main import run

        monkeypatch.setenv("LOG_LEVEL", "verbose")

        with patch("builtins.input") as mock_input:
            exit_code = run(["--skip-auth-check"])

        assert exit_code == 1
        assert "Invalid configuration" in capsys.readouterr().out
        mock_input.assert_not_called()
