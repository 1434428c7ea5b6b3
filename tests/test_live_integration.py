import os

import pytest

from emailable_verifier.client import EmailableClient
from emailable_verifier.config import ClientConfig
from emailable_verifier.errors import UpstreamBusyError

requires_live = pytest.mark.skipif(
    os.getenv("RUN_LIVE_INTEGRATION") != "1" or not os.getenv("EMAILABLE_API_KEY"),
    reason="Set RUN_LIVE_INTEGRATION=1 and EMAILABLE_API_KEY to execute live integration tests.",
)


@requires_live
def test_live_verify_smoke() -> None:
    config = ClientConfig(api_key=os.environ["EMAILABLE_API_KEY"])
    with EmailableClient.from_config(config) as client:
        try:
            result = client.verify(client.new_verify_request("deliverable@example.com"))
        except UpstreamBusyError:
            pytest.skip("API still processing; retry later.")
    assert result.email == "deliverable@example.com"
