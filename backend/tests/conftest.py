import sys
from pathlib import Path

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Ensure the backend package is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from screening.cache.clearance import ClearanceCache  # noqa: E402  pylint: disable=wrong-import-position
from screening.db.blacklist_store import BlacklistStore  # noqa: E402  pylint: disable=wrong-import-position
from screening.main import app  # noqa: E402  pylint: disable=wrong-import-position
from screening.scoring import risk_scorer as risk_scorer_module  # noqa: E402  pylint: disable=wrong-import-position


class ManualClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeScreeningApi:
    """Stands in for the remote screening API, scoring addresses from a lookup table."""

    def __init__(self):
        self.risk_levels = {}
        self.indicator_levels = {}
        self.calls = []
        self.status_code = 200
        self.error = None
        self.payload_override = None

    @property
    def submitted(self):
        return [item["address"] for batch in self.calls for item in batch]

    def result_for(self, item):
        entities = []
        if item["address"] in self.risk_levels:
            entities.append(
                {
                    "category": "Sanctions",
                    "categoryId": "69",
                    "confidenceScoreLabel": "High",
                    "entity": "Sanctioned Entity",
                    "riskScoreLevel": self.risk_levels[item["address"]],
                    "riskScoreLevelLabel": "Severe",
                }
            )
        indicators = []
        if item["address"] in self.indicator_levels:
            indicators.append(
                {
                    "category": "Mixer",
                    "categoryId": "12",
                    "categoryRiskScoreLevel": self.indicator_levels[item["address"]],
                    "categoryRiskScoreLevelLabel": "High",
                    "riskType": "COUNTERPARTY",
                }
            )
        return {
            "address": item["address"].lower(),
            "addressSubmitted": item["address"],
            "chain": item["chain"],
            "entities": entities,
            "addressRiskIndicators": indicators,
        }

    def post(self, url, json=None, auth=None, timeout=None, **_kwargs):
        self.calls.append(json)
        self.last_auth = auth
        self.last_url = url
        if self.error is not None:
            raise self.error
        if self.payload_override is not None:
            return DummyResponse(self.payload_override, self.status_code)
        return DummyResponse([self.result_for(item) for item in json], self.status_code)


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture()
def clearance_cache(clock):
    return ClearanceCache(ttl_seconds=60, max_entries=100, clock=clock)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    return BlacklistStore(engine)


@pytest.fixture()
def screening_api(monkeypatch):
    api = FakeScreeningApi()
    monkeypatch.setattr(risk_scorer_module.requests, "post", api.post)
    return api
