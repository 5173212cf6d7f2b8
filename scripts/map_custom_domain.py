#!/usr/bin/env python3
"""
Custom Domain Mapping Script for Cloud Run.

Provisions (or extends) a global external HTTPS load balancer so a custom
subdomain routes to a Cloud Run service, then prints the DNS record to add.

Usage:
    # Interactive
    uv run python scripts/map_custom_domain.py

    # Pre-filled inputs against a specific project
    uv run python scripts/map_custom_domain.py --subdomain data.example.com \
        --service sgtm-server-eu-prod --region europe-west4 --project my-project

    # Preview only
    uv run python scripts/map_custom_domain.py --dry-run

Requirements:
    - Google Cloud SDK (gcloud) installed and authenticated
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain_lb.main import main  # noqa: E402


if __name__ == "__main__":
    main()
