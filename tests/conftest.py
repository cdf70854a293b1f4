"""Global test fixtures."""

import os

import logfire

# Set session secret before any test modules import Config
# This must happen at module load time, not in a fixture
os.environ.setdefault("IDLINK_SESSION__SECRET", "test-secret-for-unit-tests-min-32")

# Keep spans local; nothing is exported from tests
logfire.configure(send_to_logfire=False, console=False)
