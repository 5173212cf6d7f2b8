"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures for unit and integration tests.
"""

import os
from typing import Any, Callable, Dict, List
from unittest.mock import Mock

import pytest
from faker import Faker

# Set test environment before importing tool modules
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")

fake = Faker()

TEST_IP_ADDRESS = "203.0.113.10"


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (CLI workflows)")
    config.addinivalue_line("markers", "gcloud: Tests around gcloud invocations")


# =============================================================================
# Settings and Request Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file."""
    from domain_lb.core.config import Settings

    return Settings(_env_file=None)


@pytest.fixture
def request_data() -> Dict[str, Any]:
    """Generate random provisioning input for testing."""
    return {
        "subdomain": f"data.{fake.domain_name()}",
        "backend_service": f"sgtm-{fake.word()}-prod",
        "region": fake.random_element(["europe-west4", "us-central1", "asia-east1"]),
    }


@pytest.fixture
def provisioning_request(request_data):
    from domain_lb.models import ProvisioningRequest

    return ProvisioningRequest(**request_data)


# =============================================================================
# gcloud Fixtures
# =============================================================================

@pytest.fixture
def mock_compute_client():
    """ComputeClient double with an allocated IP and two proxy certificates."""
    from domain_lb.core.gcloud_client import ComputeClient

    client = Mock(spec=ComputeClient)
    client.dry_run = False
    client.describe_global_address.return_value = TEST_IP_ADDRESS
    client.get_https_proxy_certificates.return_value = ["cd-a-example-com-cert", "cd-b-example-com-cert"]
    return client


def create_completed_process(returncode: int = 0, stdout: str = "", stderr: str = "") -> Mock:
    """Create a mock subprocess.CompletedProcess."""
    result = Mock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def get_called_methods(mock_client: Mock) -> List[str]:
    """Names of the client methods called, in call order."""
    return [call[0] for call in mock_client.method_calls]


@pytest.fixture
def completed_process() -> Callable[..., Mock]:
    return create_completed_process


@pytest.fixture
def called_methods() -> Callable[[Mock], List[str]]:
    return get_called_methods
