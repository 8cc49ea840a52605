"""
Root conftest.py for the Fleet Admin project.

Puts every service directory on sys.path so that service tests can import
their ``app`` package without installing it first.
"""

import sys
from pathlib import Path


def pytest_configure(config):
    """
    Configure pytest to add service directories to sys.path.

    Services are added before test collection starts because each service's
    tests/conftest.py imports from ``app`` at module level.
    """
    root_dir = Path(__file__).parent
    services_dir = root_dir / "services"

    for service_path in sorted(services_dir.iterdir()):
        if (service_path / "app").is_dir() and str(service_path) not in sys.path:
            sys.path.insert(0, str(service_path))
