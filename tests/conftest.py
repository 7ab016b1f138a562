"""
Pytest configuration and shared test doubles.
"""
import os

# Settings()는 import 시점에 생성되므로 앱 모듈보다 먼저 필수 환경변수를 채운다
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("ENABLE_SCHEDULER", "false")

from datetime import datetime, timezone

import pytest

from core.interfaces import IProfileStore, SubscriptionUpdate
from core.responses import StoreUpdateFailed

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class DummyProfileStore(IProfileStore):
    """profiles 테이블을 흉내내는 메모리 저장소"""

    def __init__(self, profiles=None):
        self.profiles = {user_id: dict(row) for user_id, row in (profiles or {}).items()}
        self.updates = []
        self.fail_updates = False

    async def update_subscription(self, user_id, update: SubscriptionUpdate):
        self.updates.append((user_id, update))
        if self.fail_updates:
            raise StoreUpdateFailed(user_id, "Error updating profile: connection reset")
        if user_id not in self.profiles:
            raise StoreUpdateFailed(user_id, f"Profile not found for user {user_id}")
        self.profiles[user_id].update(update.to_record())
        return self.profiles[user_id]

    async def get_expired_subscriptions(self, now):
        expired = []
        for row in self.profiles.values():
            end_date = row.get("subscription_end_date")
            if not end_date or row.get("subscription_plan") == "free":
                continue
            if datetime.fromisoformat(end_date) < now:
                expired.append(dict(row))
        return expired


def free_profile(user_id):
    return {
        "user_id": user_id,
        "subscription_plan": "free",
        "words_limit": 500,
        "words_used": 120,
        "subscription_start_date": None,
        "subscription_end_date": None,
    }


@pytest.fixture
def profile_store():
    return DummyProfileStore(
        profiles={
            "u1": free_profile("u1"),
            "u2": {
                "user_id": "u2",
                "subscription_plan": "pro",
                "words_limit": 100000,
                "words_used": 4200,
                "subscription_start_date": "2025-02-10T00:00:00+00:00",
                "subscription_end_date": "2025-03-12T00:00:00+00:00",
            },
        }
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock(fixed_now):
    return lambda: fixed_now
