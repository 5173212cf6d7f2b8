"""Provisioning request, derived resource names and workflow outcomes.

Every name the workflows hand to gcloud is computed here, in
``ResourceNames.for_request``. Separate runs of the tool find each
other's resources only through these names.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from domain_lb.core.config import GCE_NAME_MAX_LENGTH, GCE_NAME_PATTERN, Settings
from domain_lb.core.exceptions import InvalidRequestError


def make_resource_slug(subdomain: str) -> str:
    """Naming stem for per-domain resources: ``data.example.com`` -> ``data-example-com``."""
    return subdomain.strip().lower().replace(".", "-")


def subdomain_error(subdomain: str) -> Optional[str]:
    """Explain why ``subdomain`` cannot name resources, or ``None`` if it can."""
    slug = make_resource_slug(subdomain)
    if slug and not GCE_NAME_PATTERN.match(slug):
        return (
            f"Subdomain '{subdomain.strip()}' cannot be used for resource names "
            f"('{slug}' must start with a letter and contain only "
            "letters, digits, dots and hyphens)"
        )
    return None


class LoadBalancerPlan(str, Enum):
    """Which provisioning sequence to run."""

    CREATE_NEW = "create"
    EXTEND_EXISTING = "extend"


class StepStatus(Enum):
    """Result of a single provisioning step."""

    CREATED = "CREATED"
    FOUND = "FOUND"
    UPDATED = "UPDATED"
    SKIPPED = "SKIPPED"


class OutcomeStatus(Enum):
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class ProvisioningRequest(BaseModel):
    """The three operator inputs for one domain addition."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    subdomain: str = Field(
        ...,
        min_length=1,
        description="Subdomain to map, e.g. data.example.com",
    )
    backend_service: str = Field(
        ...,
        min_length=1,
        description="Cloud Run service the load balancer routes to",
    )
    region: str = Field(
        ...,
        min_length=1,
        description="Region of the Cloud Run service",
    )

    @field_validator("subdomain")
    @classmethod
    def validate_subdomain(cls, v: str) -> str:
        """The subdomain must produce a usable resource name stem."""
        message = subdomain_error(v)
        if message:
            raise ValueError(message)
        return v

    @property
    def resource_slug(self) -> str:
        return make_resource_slug(self.subdomain)

    @classmethod
    def from_input(
        cls, subdomain: str, backend_service: str, region: str
    ) -> "ProvisioningRequest":
        """Build a request, reporting invalid input as ``InvalidRequestError``."""
        try:
            return cls(subdomain=subdomain, backend_service=backend_service, region=region)
        except ValidationError as e:
            error = e.errors()[0]
            field_name = str(error["loc"][0]) if error.get("loc") else None
            reason = error.get("ctx", {}).get("error", error["msg"])
            raise InvalidRequestError(str(reason), field=field_name)


@dataclass(frozen=True)
class ResourceNames:
    """Names of every resource a workflow creates, describes or updates."""

    certificate: str
    network_endpoint_group: str
    backend_service: str
    path_matcher: str
    url_map: str
    https_proxy: str
    forwarding_rule: str
    global_address: str

    @classmethod
    def for_request(cls, request: ProvisioningRequest, settings: Settings) -> "ResourceNames":
        return cls.for_subdomain(request.subdomain, settings)

    @classmethod
    def for_subdomain(cls, subdomain: str, settings: Settings) -> "ResourceNames":
        """Derive and validate all names; raises ``InvalidRequestError``."""
        message = subdomain_error(subdomain)
        if message:
            raise InvalidRequestError(message, field="subdomain", value=subdomain)

        slug = make_resource_slug(subdomain)
        prefix = settings.RESOURCE_PREFIX
        names = cls(
            certificate=f"{prefix}-{slug}-cert",
            network_endpoint_group=f"{prefix}-{slug}-neg",
            backend_service=f"{prefix}-{slug}",
            path_matcher=slug,
            url_map=settings.URL_MAP_NAME,
            https_proxy=settings.proxy_name,
            forwarding_rule=settings.forwarding_rule_name,
            global_address=settings.IP_ADDRESS_NAME,
        )
        names.validate()
        return names

    def validate(self) -> None:
        for name in [
            self.certificate,
            self.network_endpoint_group,
            self.backend_service,
            self.path_matcher,
            self.https_proxy,
            self.forwarding_rule,
        ]:
            if len(name) > GCE_NAME_MAX_LENGTH:
                raise InvalidRequestError(
                    f"Resource name '{name}' is longer than {GCE_NAME_MAX_LENGTH} characters; "
                    "use a shorter subdomain",
                    field="subdomain",
                    value=name,
                )
            if not GCE_NAME_PATTERN.match(name):
                raise InvalidRequestError(
                    f"Resource name '{name}' is not a valid resource name",
                    field="subdomain",
                    value=name,
                )


@dataclass
class StepResult:
    name: str
    status: StepStatus


@dataclass
class ProvisioningOutcome:
    """What a run ended with. The caller maps it to an exit code."""

    status: OutcomeStatus
    plan: Optional[LoadBalancerPlan] = None
    request: Optional[ProvisioningRequest] = None
    ip_address: Optional[str] = None
    steps: List[StepResult] = field(default_factory=list)

    @classmethod
    def aborted(
        cls,
        request: Optional[ProvisioningRequest] = None,
        plan: Optional[LoadBalancerPlan] = None,
    ) -> "ProvisioningOutcome":
        return cls(status=OutcomeStatus.ABORTED, plan=plan, request=request)

    @property
    def is_completed(self) -> bool:
        return self.status == OutcomeStatus.COMPLETED
