from __future__ import annotations

import pytest

from runpod_media.jobs.jobs_client import JobClient
from tests.mocks.runpod_http import DummyTransport

ENDPOINT = "https://api.runpod.ai/v2/test-endpoint"


@pytest.fixture(autouse=True)
def runpod_env(monkeypatch):
    for name in ("RUNPOD_API_KEY", "RUNPOD_BASE_URL", "RUNPOD_API_ROOT", "RUNPOD_HEADERS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def transport(monkeypatch) -> DummyTransport:
    dummy = DummyTransport()
    monkeypatch.setattr("httpx.AsyncClient", dummy.client)
    return dummy


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def job_client(transport, sleeps) -> JobClient:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return JobClient(
        base_url=ENDPOINT,
        headers={"Authorization": "Bearer test-key"},
        sleep=fake_sleep,
    )
