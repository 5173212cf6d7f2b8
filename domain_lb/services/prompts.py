"""
Interactive prompts: input collection, confirmation and plan selection.

Invalid input is never fatal here; every prompt loops until it gets an
answer it accepts. Abort decisions are returned to the caller.
"""

from typing import Optional

from domain_lb.core.config import Settings, get_settings
from domain_lb.core.console import Colors, colored, error, warn
from domain_lb.core.exceptions import InvalidRequestError
from domain_lb.core.logging import get_service_logger
from domain_lb.models import LoadBalancerPlan, ProvisioningRequest, ResourceNames

logger = get_service_logger("prompts")

PLAN_CHOICES = {
    "1": LoadBalancerPlan.CREATE_NEW,
    "2": LoadBalancerPlan.EXTEND_EXISTING,
}
QUIT_CHOICES = ["q", "Q"]


def prompt_non_empty(prompt: str, empty_message: str) -> str:
    """Ask until a non-blank value is entered; return it stripped."""
    while True:
        value = input(prompt).strip()
        if value:
            return value
        warn(empty_message)


def collect_request(
    subdomain: Optional[str] = None,
    backend_service: Optional[str] = None,
    region: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ProvisioningRequest:
    """Collect subdomain, Cloud Run service and region.

    Values already supplied (e.g. from command-line flags) are used as-is
    when they are valid; anything missing or unusable is prompted for.
    """
    settings = settings or get_settings()

    subdomain = (subdomain or "").strip()
    while True:
        if not subdomain:
            print()
            subdomain = prompt_non_empty(
                "Enter subdomain you want to map (e.g., data.yourdomain.com): ",
                "Subdomain cannot be empty. Please try again.",
            )
        try:
            ResourceNames.for_subdomain(subdomain, settings)
            break
        except InvalidRequestError as e:
            logger.info("Rejected subdomain", subdomain=subdomain, reason=e.message)
            warn(e.message)
            subdomain = ""

    backend_service = (backend_service or "").strip() or prompt_non_empty(
        "Enter Cloud Run backend service name (e.g., sgtm-server-eu-prod): ",
        "Service name cannot be empty. Please try again.",
    )
    region = (region or "").strip() or prompt_non_empty(
        "Enter region for your resources (e.g., europe-west4): ",
        "Region cannot be empty. Please try again.",
    )

    return ProvisioningRequest.from_input(subdomain, backend_service, region)


def confirm_request(request: ProvisioningRequest) -> bool:
    """Echo the collected values and require an exact ``yes`` or ``no``."""
    print()
    print(colored("🔍 Please confirm your settings:", Colors.BOLD))
    print(f"• Subdomain        : {request.subdomain}")
    print(f"• Cloud Run Service: {request.backend_service}")
    print(f"• Region           : {request.region}")
    print()

    while True:
        answer = input("Is this information correct? (yes/no): ").strip()
        # Case-sensitive on purpose: "YES" and "y" are re-prompted
        if answer == "yes":
            return True
        if answer == "no":
            error("Aborted by user.")
            return False
        warn("Please answer 'yes' or 'no'.")


def choose_plan() -> Optional[LoadBalancerPlan]:
    """Ask which workflow to run. ``None`` means the operator quit."""
    while True:
        print()
        print("What do you want to do?")
        print("1) Create a new load balancer")
        print("2) Add domain to existing load balancer")
        print("q) Quit")
        choice = input("Choose option (1, 2 or q): ").strip()

        if choice in PLAN_CHOICES:
            return PLAN_CHOICES[choice]
        if choice in QUIT_CHOICES:
            print("👋  Exiting...")
            return None
        error("Invalid choice. Please enter 1, 2, or q.")
