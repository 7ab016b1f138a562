"""
데이터베이스 연결 및 profiles 구독 필드 갱신을 위한 헬퍼 모듈
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

import httpx
from supabase import Client

from core.interfaces import IProfileStore, SubscriptionUpdate
from core.responses import StoreUpdateFailed

logger = logging.getLogger(__name__)

PROFILES_TABLE = 'profiles'


class DatabaseHelper(IProfileStore):
    RETRYABLE_ERRORS = (asyncio.TimeoutError, httpx.TransportError)

    def __init__(
        self,
        admin_client: Client,
        timeout_seconds: float = 10.0,
        max_retries: int = 1,
    ):
        self.admin_client = admin_client
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries

    async def _execute(self, operation: str, query: Callable[[], Any]) -> Any:
        """동기 supabase 쿼리를 스레드에서 실행 (제한 시간 + 재시도 1회)"""
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(
                    asyncio.to_thread(query),
                    timeout=self.timeout_seconds,
                )
            except self.RETRYABLE_ERRORS as e:
                if attempt >= self.max_retries:
                    logger.error(f"{operation} 실패 (재시도 {attempt}회 후): {e!r}")
                    raise
                attempt += 1
                logger.warning(f"{operation} 일시 오류, 재시도 {attempt}/{self.max_retries}: {e!r}")

    async def update_subscription(self, user_id: str, update: SubscriptionUpdate) -> Dict[str, Any]:
        """사용자 구독 상태 갱신 (마지막 쓰기 우선, 동시성 토큰 없음)"""
        record = update.to_record()

        def _query():
            return (
                self.admin_client.table(PROFILES_TABLE)
                .update(record)
                .eq('user_id', user_id)
                .execute()
            )

        try:
            result = await self._execute('구독 갱신', _query)
        except Exception as e:
            logger.error(f"프로필 구독 갱신 실패: user_id={user_id}, error={e}")
            raise StoreUpdateFailed(user_id, f"Error updating profile: {e}") from e

        if not result.data:
            logger.warning(f"갱신할 프로필이 없습니다: user_id={user_id}")
            raise StoreUpdateFailed(user_id, f"Profile not found for user {user_id}")

        return result.data[0]

    async def get_expired_subscriptions(self, now: datetime) -> List[Dict[str, Any]]:
        """만료된 유료 구독 조회 (배치 작업용). 조회 실패는 호출자에게 전달"""
        current_time = now.isoformat()
        result = await self._execute(
            '만료 구독 조회',
            lambda: (
                self.admin_client.table(PROFILES_TABLE)
                .select('*')
                .lt('subscription_end_date', current_time)
                .neq('subscription_plan', 'free')
                .execute()
            ),
        )
        return result.data or []
