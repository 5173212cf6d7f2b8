"""Data models for the provisioning workflows.

Import from this module: `from domain_lb.models import ProvisioningRequest`
"""

from domain_lb.models.provisioning import (
    LoadBalancerPlan,
    OutcomeStatus,
    ProvisioningOutcome,
    ProvisioningRequest,
    ResourceNames,
    StepResult,
    StepStatus,
    make_resource_slug,
)

__all__ = [
    "LoadBalancerPlan",
    "OutcomeStatus",
    "ProvisioningOutcome",
    "ProvisioningRequest",
    "ResourceNames",
    "StepResult",
    "StepStatus",
    "make_resource_slug",
]
