import os
import tempfile

import pytest

# Keep audit logs out of the working tree; must be set before autonotes.utils.logging is imported
os.environ.setdefault("AUTONOTES_LOG_DIR", os.path.join(tempfile.gettempdir(), "autonotes-test-logs"))

from autonotes.utils.config import AgentSettings


@pytest.fixture
def configured_settings():
    return AgentSettings(
        base_url="https://neuralseek.test/v1/acme/",
        api_key="secret-key",
        call_agent="call_notes",
        financial_agent="fin_health",
    )


@pytest.fixture
def unconfigured_settings():
    return AgentSettings()
