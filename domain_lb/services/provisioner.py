"""
Load balancer provisioning workflows.

Two fixed sequences of gcloud calls:

1. Create a new load balancer: global IP, certificate, serverless NEG,
   backend service, URL map, path matcher, HTTPS proxy, forwarding rule.
2. Add a domain to an existing load balancer: look up the shared IP,
   create the per-domain certificate, NEG, backend service and path
   matcher, then append the certificate to the shared HTTPS proxy.

Steps run strictly in order with no retries and no rollback. When a
step fails the earlier steps stay applied and the exception propagates.
"""

from typing import Any, Callable, List, Optional

from domain_lb.core.config import Settings, get_settings
from domain_lb.core.console import Colors, colored, status_icon
from domain_lb.core.exceptions import MissingCertificatesError
from domain_lb.core.gcloud_client import ComputeClient
from domain_lb.core.logging import get_service_logger
from domain_lb.models import (
    LoadBalancerPlan,
    OutcomeStatus,
    ProvisioningOutcome,
    ProvisioningRequest,
    ResourceNames,
    StepResult,
    StepStatus,
)
from domain_lb.services.prompts import choose_plan, collect_request, confirm_request

logger = get_service_logger("provisioner")

CREATE_NEW_STEPS = [
    "Global IP address",
    "Read global IP address",
    "SSL certificate",
    "Serverless NEG",
    "Backend service",
    "Add NEG to backend service",
    "URL map",
    "Path matcher",
    "HTTPS proxy",
    "Forwarding rule",
]

EXTEND_EXISTING_STEPS = [
    "Read global IP address",
    "SSL certificate",
    "Serverless NEG",
    "Backend service",
    "Add NEG to backend service",
    "Path matcher",
    "HTTPS proxy certificates",
]


class _StepTracker:
    """Numbers, reports and records the steps of one run."""

    def __init__(self, labels: List[str], dry_run: bool = False):
        self.labels = labels
        self.dry_run = dry_run
        self.index = 0
        self.results: List[StepResult] = []

    def run(self, action: Callable[[], Any], status: StepStatus = StepStatus.CREATED) -> Any:
        label = self.labels[self.index]
        self.index += 1
        print(f"[{self.index}/{len(self.labels)}] {label}")

        result = action()

        final_status = StepStatus.SKIPPED if self.dry_run else status
        self.results.append(StepResult(name=label, status=final_status))
        print(f"      Status: {status_icon(final_status)}")
        print()
        logger.info(
            "Step finished", step=label, index=self.index, status=final_status.value
        )
        return result


class LoadBalancerProvisioner:
    """Runs one of the two provisioning plans against a ``ComputeClient``."""

    def __init__(self, client: ComputeClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    def run(self, request: ProvisioningRequest, plan: LoadBalancerPlan) -> ProvisioningOutcome:
        if plan == LoadBalancerPlan.CREATE_NEW:
            return self.create_load_balancer(request)
        if plan == LoadBalancerPlan.EXTEND_EXISTING:
            return self.add_domain_to_load_balancer(request)
        raise ValueError(f"Unknown plan: {plan}")

    def create_load_balancer(self, request: ProvisioningRequest) -> ProvisioningOutcome:
        """Provision every load balancer resource from scratch.

        Fails on the first step if the shared global IP already exists.
        """
        names = ResourceNames.for_request(request, self.settings)
        client = self.client
        steps = _StepTracker(CREATE_NEW_STEPS, dry_run=client.dry_run)

        print()
        print(colored("Creating load balancer...", Colors.BOLD))
        print()
        logger.info("Creating load balancer", subdomain=request.subdomain, url_map=names.url_map)

        steps.run(lambda: client.create_global_address(names.global_address))
        ip_address = steps.run(
            lambda: client.describe_global_address(names.global_address), StepStatus.FOUND
        )
        self._create_domain_backend(request, names, steps)
        steps.run(lambda: client.create_url_map(names.url_map, names.backend_service))
        self._add_path_matcher(request, names, steps)
        steps.run(lambda: client.create_https_proxy(
            names.https_proxy, names.certificate, names.url_map
        ))
        steps.run(lambda: client.create_forwarding_rule(
            names.forwarding_rule, ip_address, names.https_proxy
        ))

        return ProvisioningOutcome(
            status=OutcomeStatus.COMPLETED,
            plan=LoadBalancerPlan.CREATE_NEW,
            request=request,
            ip_address=ip_address,
            steps=steps.results,
        )

    def add_domain_to_load_balancer(self, request: ProvisioningRequest) -> ProvisioningOutcome:
        """Route a new subdomain through a load balancer created earlier by this tool.

        The shared IP, URL map and proxy are looked up, never created. A
        missing IP fails the first step.
        """
        names = ResourceNames.for_request(request, self.settings)
        client = self.client
        steps = _StepTracker(EXTEND_EXISTING_STEPS, dry_run=client.dry_run)

        print()
        print(colored("Adding domain to load balancer...", Colors.BOLD))
        print()
        logger.info("Adding domain to load balancer", subdomain=request.subdomain, url_map=names.url_map)

        ip_address = steps.run(
            lambda: client.describe_global_address(names.global_address), StepStatus.FOUND
        )
        self._create_domain_backend(request, names, steps)
        self._add_path_matcher(request, names, steps)
        steps.run(lambda: self._append_proxy_certificate(names), StepStatus.UPDATED)

        return ProvisioningOutcome(
            status=OutcomeStatus.COMPLETED,
            plan=LoadBalancerPlan.EXTEND_EXISTING,
            request=request,
            ip_address=ip_address,
            steps=steps.results,
        )

    def _create_domain_backend(
        self, request: ProvisioningRequest, names: ResourceNames, steps: _StepTracker
    ) -> None:
        client = self.client
        steps.run(lambda: client.create_ssl_certificate(names.certificate, request.subdomain))
        steps.run(lambda: client.create_serverless_neg(
            names.network_endpoint_group, request.region, request.backend_service
        ))
        steps.run(lambda: client.create_backend_service(names.backend_service))
        steps.run(lambda: client.add_backend(
            names.backend_service, names.network_endpoint_group, request.region
        ))

    def _add_path_matcher(
        self, request: ProvisioningRequest, names: ResourceNames, steps: _StepTracker
    ) -> None:
        steps.run(lambda: self.client.add_path_matcher(
            names.url_map, names.path_matcher, names.backend_service, request.subdomain
        ))

    def _append_proxy_certificate(self, names: ResourceNames) -> List[str]:
        # The update call replaces the proxy's whole list, so every
        # existing certificate has to be sent again.
        print(f"      Retrieving existing certificates from HTTPS proxy: {names.https_proxy}...")
        existing = self.client.get_https_proxy_certificates(names.https_proxy)
        if not existing:
            logger.error("Proxy has no certificates", proxy=names.https_proxy)
            raise MissingCertificatesError(names.https_proxy)

        certificates = list(existing)
        if names.certificate not in certificates:
            certificates.append(names.certificate)

        print(f"      Updating HTTPS proxy with certificates: {','.join(certificates)}")
        self.client.update_https_proxy_certificates(names.https_proxy, certificates)
        return certificates


def print_summary(outcome: ProvisioningOutcome) -> None:
    """Print the DNS instructions for a completed run."""
    if not outcome.is_completed:
        return

    if outcome.plan == LoadBalancerPlan.CREATE_NEW:
        banner = "✅  Creating finished"
    else:
        banner = "✅  Adding finished"

    print("=" * 50)
    print(colored(banner, Colors.GREEN + Colors.BOLD))
    print("=" * 50)
    print(f"Global IP address: {colored(outcome.ip_address, Colors.BLUE)}")
    print(f"Add this IP address in your DNS records for domain: {outcome.request.subdomain}")
    print()


def run_interactive(
    client: ComputeClient,
    settings: Optional[Settings] = None,
    subdomain: Optional[str] = None,
    backend_service: Optional[str] = None,
    region: Optional[str] = None,
    plan: Optional[LoadBalancerPlan] = None,
) -> ProvisioningOutcome:
    """Collect input, confirm it, pick a plan and provision.

    Returns an aborted outcome when the operator answers ``no`` or quits;
    no gcloud call has been made at that point.
    """
    settings = settings or get_settings()

    request = collect_request(subdomain, backend_service, region, settings=settings)

    if not confirm_request(request):
        logger.info("Aborted at confirmation", subdomain=request.subdomain)
        return ProvisioningOutcome.aborted(request=request)

    if plan is None:
        plan = choose_plan()
    if plan is None:
        logger.info("Aborted at plan selection", subdomain=request.subdomain)
        return ProvisioningOutcome.aborted(request=request)

    outcome = LoadBalancerProvisioner(client, settings).run(request, plan)
    print_summary(outcome)
    return outcome
