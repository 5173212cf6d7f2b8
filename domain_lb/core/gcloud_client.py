"""
Typed wrapper around the ``gcloud compute`` commands used by the load
balancer workflows.

Each method issues exactly one gcloud call. Failures are not retried;
a non-zero exit raises ``GcloudCommandError`` carrying gcloud's own
diagnostics.
"""

import json
import subprocess
from typing import List, Optional, Tuple

from domain_lb.core.exceptions import (
    ExternalCommandError,
    GcloudAuthError,
    GcloudCommandError,
    GcloudNotFoundError,
)
from domain_lb.core.logging import get_gcloud_logger

logger = get_gcloud_logger()

# Values returned by describe calls in dry-run mode
DRY_RUN_ADDRESS = "<global-ip>"
DRY_RUN_CERTIFICATE = "<existing-certificates>"


def run_gcloud_command(
    args: list, capture_output: bool = True, binary: str = "gcloud"
) -> Tuple[bool, str]:
    """Run a gcloud command and return success status and output."""
    cmd = [binary] + args
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            text=True,
            check=False
        )
    except FileNotFoundError:
        raise GcloudNotFoundError(binary)

    if result.returncode == 0:
        return True, result.stdout.strip() if capture_output else ""
    else:
        return False, result.stderr.strip() if capture_output else ""


def check_gcloud_auth(binary: str = "gcloud") -> bool:
    """Check if gcloud is authenticated."""
    success, output = run_gcloud_command(["auth", "list", "--format=json"], binary=binary)
    if not success:
        logger.error("gcloud auth check failed", output=output)
        return False

    try:
        accounts = json.loads(output)
    except json.JSONDecodeError:
        logger.error("Failed to parse gcloud auth output")
        return False

    active_accounts = [a for a in accounts if a.get("status") == "ACTIVE"]
    if active_accounts:
        logger.info("Authenticated", account=active_accounts[0].get("account"))
        return True
    logger.error("No active gcloud account")
    return False


def ensure_gcloud_auth(binary: str = "gcloud") -> None:
    """Raise ``GcloudAuthError`` unless an active gcloud account exists."""
    if not check_gcloud_auth(binary):
        raise GcloudAuthError()


def certificate_name_from_url(url: str) -> str:
    """Strip the resource URL down to the certificate name."""
    return url.rstrip("/").rsplit("/", 1)[-1]


class ComputeClient:
    """One method per compute resource operation the workflows need."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        network_tier: str = "PREMIUM",
        dry_run: bool = False,
        binary: str = "gcloud",
    ):
        self.project_id = project_id
        self.network_tier = network_tier
        self.dry_run = dry_run
        self.binary = binary

    def _run(self, args: List[str], capture_output: bool = False) -> str:
        cmd_args = ["compute"] + args
        if self.project_id:
            cmd_args += ["--project", self.project_id]

        command = " ".join([self.binary] + cmd_args)
        if self.dry_run:
            print(f"      [DRY RUN] Would run: {command}")
            return ""

        logger.debug("Running gcloud command", command=command)
        success, output = run_gcloud_command(
            cmd_args, capture_output=capture_output, binary=self.binary
        )
        if not success:
            logger.error("gcloud command failed", command=command, output=output)
            raise GcloudCommandError(cmd_args, output)
        return output

    # Global IP address

    def create_global_address(self, name: str) -> None:
        self._run([
            "addresses", "create", name,
            f"--network-tier={self.network_tier}",
            "--ip-version=IPV4",
            "--global",
        ])

    def describe_global_address(self, name: str) -> str:
        """Return the IP value of a reserved global address."""
        output = self._run([
            "addresses", "describe", name,
            "--format=value(address)",
            "--global",
        ], capture_output=True)
        if self.dry_run:
            return DRY_RUN_ADDRESS
        if not output:
            raise ExternalCommandError(
                f"Global address '{name}' has no IP value", "gcloud", {"address": name}
            )
        return output

    # SSL certificate

    def create_ssl_certificate(self, name: str, domain: str) -> None:
        self._run([
            "ssl-certificates", "create", name,
            f"--domains={domain}",
            "--global",
        ])

    # Serverless NEG and backend service

    def create_serverless_neg(self, name: str, region: str, cloud_run_service: str) -> None:
        self._run([
            "network-endpoint-groups", "create", name,
            f"--region={region}",
            "--network-endpoint-type=serverless",
            f"--cloud-run-service={cloud_run_service}",
        ])

    def create_backend_service(self, name: str) -> None:
        self._run([
            "backend-services", "create", name,
            "--load-balancing-scheme=EXTERNAL_MANAGED",
            "--protocol=HTTPS",
            "--port-name=http",
            "--global",
        ])

    def add_backend(self, backend_service: str, neg_name: str, region: str) -> None:
        self._run([
            "backend-services", "add-backend", backend_service,
            "--global",
            f"--network-endpoint-group={neg_name}",
            f"--network-endpoint-group-region={region}",
        ])

    # URL map

    def create_url_map(self, name: str, default_service: str) -> None:
        self._run([
            "url-maps", "create", name,
            f"--default-service={default_service}",
        ])

    def add_path_matcher(
        self, url_map: str, matcher_name: str, backend_service: str, host: str
    ) -> None:
        """Route every path on ``host`` to ``backend_service``."""
        self._run([
            "url-maps", "add-path-matcher", url_map,
            f"--path-matcher-name={matcher_name}",
            f"--default-service={backend_service}",
            f"--path-rules=/*={backend_service}",
            f"--new-hosts={host}",
        ])

    # Target HTTPS proxy

    def create_https_proxy(self, name: str, certificate: str, url_map: str) -> None:
        self._run([
            "target-https-proxies", "create", name,
            f"--ssl-certificates={certificate}",
            f"--url-map={url_map}",
        ])

    def get_https_proxy_certificates(self, name: str) -> List[str]:
        """Return the proxy's certificate names in their current order."""
        output = self._run([
            "target-https-proxies", "describe", name,
            "--format=json",
        ], capture_output=True)
        if self.dry_run:
            return [DRY_RUN_CERTIFICATE]

        try:
            proxy = json.loads(output) if output else {}
        except json.JSONDecodeError:
            raise ExternalCommandError(
                f"Could not parse description of proxy '{name}'", "gcloud", {"output": output}
            )
        return [certificate_name_from_url(url) for url in proxy.get("sslCertificates", [])]

    def update_https_proxy_certificates(self, name: str, certificates: List[str]) -> None:
        """Replace the proxy's whole certificate list with ``certificates``."""
        self._run([
            "target-https-proxies", "update", name,
            f"--ssl-certificates={','.join(certificates)}",
        ])

    # Forwarding rule

    def create_forwarding_rule(self, name: str, address: str, target_proxy: str) -> None:
        self._run([
            "forwarding-rules", "create", name,
            "--load-balancing-scheme=EXTERNAL_MANAGED",
            f"--network-tier={self.network_tier}",
            f"--address={address}",
            f"--target-https-proxy={target_proxy}",
            "--global",
            "--ports=443",
        ])
