"""
구독 권한 조정 서비스
결제 웹훅 이벤트에 따라 profiles의 요금제, 사용량 한도, 구독 기간을 갱신

활성화 이벤트는 매번 plan_id로부터 전체 상태(한도, 사용량 0, 새 30일 기간)를
다시 계산하므로 같은 이벤트가 재전송돼도 결과가 같다. 이벤트 ID 중복 제거는 하지 않는다.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from core.base_service import BaseService
from core.interfaces import IEntitlementService, IProfileStore, SubscriptionUpdate
from core.plan_catalog import FREE_PLAN, FREE_WORDS_LIMIT, SUBSCRIPTION_TERM_DAYS, PlanCatalog
from core.responses import MissingMetadata, StoreUpdateFailed
from services.payment_events import PaymentEvent, PaymentEventType

ACTIVATED = "activated"
DEACTIVATED = "deactivated"
SKIPPED = "skipped"
IGNORED = "ignored"


@dataclass
class ReconcileOutcome:
    action: str
    user_id: Optional[str] = None
    plan: Optional[str] = None
    reason: Optional[str] = None
    store_error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"received": True}
        if self.action == SKIPPED:
            body["skipped"] = True
            body["reason"] = self.reason
        return body


class EntitlementService(BaseService, IEntitlementService):
    """결제 이벤트 -> 구독 상태 전이"""

    def __init__(
        self,
        store: IProfileStore,
        catalog: PlanCatalog,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(store, clock)
        self.catalog = catalog
        self._handlers: Dict[PaymentEventType, Callable[[PaymentEvent], Awaitable[ReconcileOutcome]]] = {
            event_type: self._handler_for(event_type) for event_type in PaymentEventType
        }

    def _handler_for(self, event_type: PaymentEventType) -> Callable[[PaymentEvent], Awaitable[ReconcileOutcome]]:
        if event_type.is_activation:
            return self._activate
        if event_type.is_deactivation:
            return self._deactivate
        return self._ignore

    async def reconcile(self, event: PaymentEvent) -> ReconcileOutcome:
        """이벤트 종류별 핸들러로 분기"""
        self.logger.info(
            "[DODO] processing event type=%s user=%s plan=%s amount=%s",
            event.raw_type,
            event.user_id,
            event.plan_id,
            event.amount,
        )
        return await self._handlers[event.type](event)

    async def _activate(self, event: PaymentEvent) -> ReconcileOutcome:
        # 0원 결제(체험/테스트 콜백)는 어떤 저장소 변경보다 먼저 거른다
        if event.amount <= 0:
            reason = (
                "Zero amount payment"
                if event.type is PaymentEventType.PAYMENT_SUCCEEDED
                else "Zero amount subscription"
            )
            self.logger.warning(
                "[DODO] rejecting zero amount %s - subscription not activated. amount=%s",
                event.raw_type,
                event.amount,
            )
            return ReconcileOutcome(action=SKIPPED, user_id=event.user_id, reason=reason)

        if not event.user_id or not event.plan_id:
            raise MissingMetadata()

        entitlement = self.catalog.require(event.plan_id)

        started_at = self.now()
        update = SubscriptionUpdate(
            plan=entitlement.plan_name,
            words_limit=entitlement.words_limit,
            words_used=0,
            start_date=started_at,
            end_date=started_at + timedelta(days=SUBSCRIPTION_TERM_DAYS),
            updated_at=started_at,
        )
        # 실패 시 StoreUpdateFailed가 그대로 전달되어 500 -> 결제사 재전송
        await self.store.update_subscription(event.user_id, update)

        self.log_operation(
            "subscription_activated",
            event.user_id,
            {"plan": entitlement.plan_name, "amount": str(event.amount), "event_type": event.raw_type},
        )
        return ReconcileOutcome(action=ACTIVATED, user_id=event.user_id, plan=entitlement.plan_name)

    async def _deactivate(self, event: PaymentEvent) -> ReconcileOutcome:
        if not event.user_id:
            self.logger.warning("[DODO] %s without user_id - nothing to downgrade", event.raw_type)
            return ReconcileOutcome(action=SKIPPED, reason="Missing user_id")

        # 사용량과 구독 기간은 그대로 둔다
        update = SubscriptionUpdate(
            plan=FREE_PLAN,
            words_limit=FREE_WORDS_LIMIT,
            updated_at=self.now(),
        )
        try:
            await self.store.update_subscription(event.user_id, update)
        except StoreUpdateFailed as e:
            # 해지/환불 응답은 저장소 실패로 막지 않는다 (결제사 재전송 없음)
            self.logger.error(
                "[DODO] error updating profile on %s for user %s: %s",
                event.raw_type,
                event.user_id,
                e.message,
            )
            return ReconcileOutcome(
                action=DEACTIVATED,
                user_id=event.user_id,
                plan=FREE_PLAN,
                store_error=e.message,
            )

        self.log_operation("subscription_deactivated", event.user_id, {"event_type": event.raw_type})
        return ReconcileOutcome(action=DEACTIVATED, user_id=event.user_id, plan=FREE_PLAN)

    async def _ignore(self, event: PaymentEvent) -> ReconcileOutcome:
        self.logger.info("[DODO] unhandled event type %s acknowledged", event.raw_type)
        return ReconcileOutcome(action=IGNORED, user_id=event.user_id)

    async def expire_subscriptions(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """구독 기간이 끝난 유료 사용자를 무료 요금제로 다운그레이드"""
        current = now or self.now()
        expired_profiles = await self.store.get_expired_subscriptions(current)
        self.logger.info(f"만료된 구독 {len(expired_profiles)}개 발견")

        downgraded: List[Dict[str, Any]] = []
        failed: List[str] = []
        for profile in expired_profiles:
            user_id = profile.get("user_id")
            if not user_id:
                continue
            update = SubscriptionUpdate(
                plan=FREE_PLAN,
                # 해지/환불과 같은 무료 한도(500) 사용. 이전 배치의 5000으로 되돌리지 말 것
                words_limit=FREE_WORDS_LIMIT,
                updated_at=current,
                clear_dates=True,
            )
            try:
                await self.store.update_subscription(user_id, update)
            except StoreUpdateFailed as e:
                self.logger.error(f"만료 구독 다운그레이드 실패: user_id={user_id}, error={e.message}")
                failed.append(user_id)
                continue

            downgraded.append({
                "user_id": user_id,
                "previous_plan": profile.get("subscription_plan"),
                "expired_date": profile.get("subscription_end_date"),
            })
            self.logger.info(
                f"Downgraded user {user_id} from {profile.get('subscription_plan')} to free plan. "
                f"Expired on: {profile.get('subscription_end_date')}"
            )

        return {
            "processed": len(downgraded),
            "failed": failed,
            "downgraded_users": downgraded,
        }
