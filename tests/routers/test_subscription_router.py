"""구독 만료 처리 엔드포인트 테스트"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from core.config import settings
from core.container import container
from core.factory import ServiceFactory
from core.interfaces import IEntitlementService
from core.plan_catalog import PlanCatalog
from services.entitlement_service import EntitlementService

URL = "/api/v1/subscriptions/expire"


@pytest.fixture
def client(profile_store, fixed_now, monkeypatch):
    from main import app

    monkeypatch.setattr(settings, "CRON_SECRET", "cron-token")
    service = EntitlementService(profile_store, PlanCatalog(), clock=lambda: fixed_now + timedelta(days=20))
    container.register_singleton(IEntitlementService, service)
    yield TestClient(app)
    container.reset()
    ServiceFactory.configure_dependencies()


def test_expire_downgrades_expired_profiles(client, profile_store):
    response = client.post(URL, headers={"Authorization": "Bearer cron-token"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "success"
    assert payload["data"]["processed"] == 1
    assert payload["data"]["downgraded_users"][0]["user_id"] == "u2"
    assert profile_store.profiles["u2"]["subscription_plan"] == "free"
    assert profile_store.profiles["u2"]["subscription_end_date"] is None


def test_expire_requires_token(client, profile_store):
    response = client.post(URL)

    assert response.status_code == 403
    assert response.json()["error_code"] == "ACCESS_DENIED"
    assert profile_store.updates == []


def test_expire_rejects_wrong_token(client):
    response = client.post(URL, headers={"Authorization": "Bearer nope"})

    assert response.status_code == 403


def test_expire_disabled_without_cron_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", None)

    response = client.post(URL, headers={"Authorization": "Bearer cron-token"})

    assert response.status_code == 403
