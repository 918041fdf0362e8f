"""Global test fixtures."""

import logfire
import pytest


@pytest.fixture(autouse=True, scope="session")
def _silence_logfire():
    # Spans and events are recorded but never exported or printed
    logfire.configure(send_to_logfire=False, console=False)
