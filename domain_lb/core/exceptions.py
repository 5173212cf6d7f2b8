from typing import Any, Dict, List, Optional


class DomainLBError(Exception):
    """Base exception for the custom domain load balancer tool."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequestError(DomainLBError):
    """Operator input cannot be turned into valid resource names."""

    def __init__(
        self, message: str, field: Optional[str] = None, value: Optional[str] = None
    ):
        details = {}
        if field:
            details["field"] = field
        if value:
            details["value"] = value
        super().__init__(message, "VALIDATION_ERROR", details)


class PreconditionError(DomainLBError):
    """Existing infrastructure is not in the state the workflow assumes."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "PRECONDITION_FAILED", details)


class MissingCertificatesError(PreconditionError):
    """The shared HTTPS proxy reports no SSL certificates."""

    def __init__(self, proxy_name: str):
        super().__init__(
            f"No existing certificates found on the proxy '{proxy_name}'. "
            "It was not provisioned by this tool or is misconfigured.",
            {"proxy": proxy_name},
        )


class ExternalCommandError(DomainLBError):
    """External command related errors."""

    def __init__(
        self, message: str, service: str, details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["service"] = service
        super().__init__(message, "EXTERNAL_SERVICE_ERROR", details)


class GcloudCommandError(ExternalCommandError):
    """A gcloud invocation exited with a non-zero status."""

    def __init__(self, args: List[str], output: str = ""):
        command = " ".join(["gcloud"] + list(args))
        message = f"gcloud command failed: {command}"
        if output:
            message = f"{message}\n{output}"
        super().__init__(message, "gcloud", {"command": command, "output": output})
        self.args_list = list(args)
        self.output = output


class GcloudNotFoundError(ExternalCommandError):
    """gcloud binary is not installed or not on PATH."""

    def __init__(self, binary: str = "gcloud"):
        super().__init__(
            f"{binary} CLI not found. Please install Google Cloud SDK.",
            "gcloud",
            {"binary": binary},
        )


class GcloudAuthError(ExternalCommandError):
    """No active gcloud account."""

    def __init__(self, output: str = ""):
        super().__init__(
            "gcloud is not authenticated. Run: gcloud auth login",
            "gcloud",
            {"output": output} if output else None,
        )
