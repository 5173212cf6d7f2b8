"""Custom domain mapping for Cloud Run via a global HTTPS load balancer."""

__version__ = "1.0.0"
