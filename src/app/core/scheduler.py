"""
배경 작업 스케줄러
만료된 구독 다운그레이드 등 정기 작업 관리
"""
import asyncio
import logging
from typing import Optional

from core.interfaces import IEntitlementService

logger = logging.getLogger(__name__)

class BackgroundScheduler:
    def __init__(self, entitlement_service: IEntitlementService, interval_seconds: int = 3600):
        self.entitlement_service = entitlement_service
        self.interval_seconds = interval_seconds
        self.running = False
        self.tasks = []

    async def start(self):
        """스케줄러 시작"""
        if self.running:
            return

        self.running = True
        logger.info("백그라운드 스케줄러 시작")

        # 만료된 구독 체크 (기본 매시간)
        self.tasks.append(
            asyncio.create_task(self._subscription_expiry_check())
        )

    async def stop(self):
        """스케줄러 중지"""
        if not self.running:
            return

        self.running = False
        logger.info("백그라운드 스케줄러 중지")

        # 모든 실행 중인 작업 취소
        for task in self.tasks:
            if not task.done():
                task.cancel()

        # 작업이 완료될 때까지 대기
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)

        self.tasks.clear()

    async def _subscription_expiry_check(self):
        """주기적으로 만료된 구독 확인"""
        while self.running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self.running:
                    break

                await self._run_expiration()

            except asyncio.CancelledError:
                logger.info("구독 만료 스케줄러 취소됨")
                break
            except Exception as e:
                logger.error(f"구독 만료 스케줄러 오류: {e}")

    async def _run_expiration(self) -> dict:
        result = await self.entitlement_service.expire_subscriptions()
        if result.get("processed", 0) > 0:
            logger.info(f"만료된 구독 {result['processed']}개 다운그레이드 완료")
        return result

# 전역 스케줄러 인스턴스
scheduler: Optional[BackgroundScheduler] = None

async def initialize_scheduler(entitlement_service: IEntitlementService, interval_seconds: int = 3600):
    """스케줄러 초기화"""
    global scheduler
    if scheduler is None:
        scheduler = BackgroundScheduler(entitlement_service, interval_seconds)
        await scheduler.start()
        logger.info("백그라운드 스케줄러 초기화 완료")

async def cleanup_scheduler():
    """스케줄러 정리"""
    global scheduler
    if scheduler:
        await scheduler.stop()
        scheduler = None
        logger.info("백그라운드 스케줄러 정리 완료")
