"""
Map a custom subdomain to a Cloud Run service through a global external
HTTPS load balancer.

Usage:
    # Interactive: prompts for subdomain, service, region and plan
    domain-lb

    # Pre-fill the prompts (confirmation is still asked)
    domain-lb --subdomain data.example.com --service sgtm-server-eu-prod --region europe-west4

    # Add a domain to the load balancer created by an earlier run
    domain-lb --plan extend

    # Preview the gcloud calls without executing them
    domain-lb --dry-run

Requirements:
    - Google Cloud SDK (gcloud) installed and authenticated
    - Compute Load Balancer Admin and Compute Network Admin (or equivalent)

Exit codes: 0 finished, 1 failed, 130 aborted by the operator.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from domain_lb.core.config import Settings
from domain_lb.core.console import Colors, colored, error
from domain_lb.core.exceptions import DomainLBError, GcloudAuthError
from domain_lb.core.gcloud_client import ComputeClient, ensure_gcloud_auth
from domain_lb.core.logging import configure_logging, get_logger
from domain_lb.models import LoadBalancerPlan
from domain_lb.services.provisioner import run_interactive

logger = get_logger("domain_lb")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_ABORTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domain-lb",
        description="Map a custom subdomain to a Cloud Run service via an HTTPS load balancer",
    )
    parser.add_argument("--subdomain", help="Subdomain to map (e.g. data.example.com)")
    parser.add_argument("--service", help="Cloud Run backend service name")
    parser.add_argument("--region", help="Region of the Cloud Run service")
    parser.add_argument(
        "--plan",
        choices=[p.value for p in LoadBalancerPlan],
        help="Skip the menu: 'create' a new load balancer or 'extend' an existing one",
    )
    parser.add_argument(
        "--project",
        help="GCP project for all gcloud calls (default: GCP_PROJECT_ID or active gcloud config)",
    )
    parser.add_argument(
        "--env-file",
        help="Load settings from this environment file before starting",
    )
    parser.add_argument(
        "--log-level",
        help="Log level for diagnostics on stderr (default: LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print gcloud commands instead of executing them",
    )
    parser.add_argument(
        "--skip-auth-check",
        action="store_true",
        help="Do not verify the active gcloud account before starting",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the environment, an optional env file and CLI overrides."""
    if args.env_file:
        env_path = Path(args.env_file)
        if not env_path.exists():
            raise DomainLBError(
                f"Environment file not found: {args.env_file}", "CONFIGURATION_ERROR"
            )
        load_dotenv(env_path, override=True)

    overrides = {}
    if args.project:
        overrides["GCP_PROJECT_ID"] = args.project
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    return Settings(**overrides)


def run(argv: Optional[List[str]] = None) -> int:
    """Run the tool and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        error(f"Invalid configuration: {e}")
        return EXIT_FAILURE
    except DomainLBError as e:
        error(e.message)
        return EXIT_FAILURE

    configure_logging(settings)

    print()
    print("=" * 50)
    print(colored("Custom Domain Load Balancer Setup", Colors.BOLD))
    print("=" * 50)
    if settings.GCP_PROJECT_ID:
        print(f"Project: {colored(settings.GCP_PROJECT_ID, Colors.BLUE)}")
    if args.dry_run:
        print(colored("[DRY RUN MODE - No changes will be made]", Colors.YELLOW))

    try:
        if not args.dry_run and not args.skip_auth_check:
            print("\nChecking gcloud authentication...", end=" ")
            ensure_gcloud_auth(settings.GCLOUD_BINARY)
            print(colored("OK", Colors.GREEN))

        client = ComputeClient(
            project_id=settings.GCP_PROJECT_ID,
            network_tier=settings.NETWORK_TIER,
            dry_run=args.dry_run,
            binary=settings.GCLOUD_BINARY,
        )
        outcome = run_interactive(
            client,
            settings,
            subdomain=args.subdomain,
            backend_service=args.service,
            region=args.region,
            plan=LoadBalancerPlan(args.plan) if args.plan else None,
        )
    except GcloudAuthError as e:
        print(colored("FAILED", Colors.RED))
        logger.error("gcloud authentication check failed", error_code=e.error_code)
        print("\nPlease authenticate with:")
        print("  gcloud auth login")
        return EXIT_FAILURE
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return EXIT_ABORTED
    except DomainLBError as e:
        logger.error("Provisioning failed", error_code=e.error_code, **e.details)
        print()
        error(e.message)
        return EXIT_FAILURE

    return EXIT_OK if outcome.is_completed else EXIT_ABORTED


def main():
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
