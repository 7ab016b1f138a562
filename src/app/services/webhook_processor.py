"""
Dodo Payments 웹훅 처리 파이프라인: 서명 검증 -> 파싱 -> 구독 조정

설정은 생성 시 주입받으므로 테스트에서 환경변수 없이 시크릿과 저장소를 바꿀 수 있다.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.interfaces import IEntitlementService
from core.responses import SignatureInvalid
from services import webhook_signature
from services.payment_events import parse_payment_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookConfig:
    secret: Optional[str] = None
    strict_verify: bool = False
    tolerance_seconds: int = 0


@dataclass
class WebhookEnvelope:
    body: bytes
    webhook_id: str = ""
    webhook_timestamp: str = ""
    webhook_signature: str = ""


class DodoWebhookProcessor:
    def __init__(self, config: WebhookConfig, entitlement_service: IEntitlementService):
        self.config = config
        self.entitlement_service = entitlement_service

    def _check_signature(self, envelope: WebhookEnvelope) -> None:
        secret = (self.config.secret or "").strip()
        strict = self.config.strict_verify

        if not secret or not envelope.webhook_signature:
            if strict:
                logger.warning(
                    "[DODO] strict verify enabled but %s",
                    "no webhook secret configured" if not secret else "webhook-signature header missing",
                )
                raise SignatureInvalid()
            logger.info("[DODO] signature verification skipped (secret or signature missing)")
            return

        is_valid = webhook_signature.verify(
            envelope.body,
            envelope.webhook_id,
            envelope.webhook_timestamp,
            envelope.webhook_signature,
            secret,
            tolerance_seconds=self.config.tolerance_seconds,
        )
        if is_valid:
            return

        if strict:
            raise SignatureInvalid()
        # lenient 모드: 기존 동작대로 경고만 남기고 처리 계속
        logger.warning("[DODO] invalid webhook signature - continuing (WEBHOOK_STRICT_VERIFY=false)")

    async def process(self, envelope: WebhookEnvelope) -> Dict[str, Any]:
        logger.info(
            "[DODO] webhook received: id=%s, timestamp=%s, len=%s",
            envelope.webhook_id,
            envelope.webhook_timestamp,
            len(envelope.body),
        )

        self._check_signature(envelope)
        event = parse_payment_event(envelope.body)
        outcome = await self.entitlement_service.reconcile(event)

        if outcome.store_error:
            logger.error("[DODO] %s acknowledged despite store error: %s", event.raw_type, outcome.store_error)

        return outcome.to_response()
