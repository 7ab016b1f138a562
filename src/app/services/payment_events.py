"""
결제 웹훅 페이로드 파싱

이벤트 종류별로 채워지는 필드가 다르므로 metadata 값은 없으면 None으로 둔다.
"""
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from core.responses import MalformedPayload

logger = logging.getLogger(__name__)


class PaymentEventType(str, Enum):
    """처리 대상 이벤트 종류"""
    PAYMENT_SUCCEEDED = "payment.succeeded"
    SUBSCRIPTION_CREATED = "subscription.created"
    SUBSCRIPTION_ACTIVE = "subscription.active"
    SUBSCRIPTION_CANCELLED = "subscription.cancelled"
    REFUND_SUCCEEDED = "refund.succeeded"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, value: str) -> "PaymentEventType":
        if value == "subscription.canceled":
            return cls.SUBSCRIPTION_CANCELLED
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_activation(self) -> bool:
        return self in _ACTIVATION_TYPES

    @property
    def is_deactivation(self) -> bool:
        return self in _DEACTIVATION_TYPES


_ACTIVATION_TYPES = frozenset({
    PaymentEventType.PAYMENT_SUCCEEDED,
    PaymentEventType.SUBSCRIPTION_CREATED,
    PaymentEventType.SUBSCRIPTION_ACTIVE,
})

_DEACTIVATION_TYPES = frozenset({
    PaymentEventType.SUBSCRIPTION_CANCELLED,
    PaymentEventType.REFUND_SUCCEEDED,
})


@dataclass
class PaymentEvent:
    type: PaymentEventType
    raw_type: str
    user_id: Optional[str] = None
    plan_id: Optional[str] = None
    amount: Decimal = Decimal(0)
    data: Dict[str, Any] = field(default_factory=dict)


def _to_decimal(value: Any) -> Optional[Decimal]:
    # bool은 int의 하위 타입이지만 금액으로 취급하지 않는다
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def _field_extractor(name: str) -> Callable[[Dict[str, Any]], Optional[Decimal]]:
    def _extract(data: Dict[str, Any]) -> Optional[Decimal]:
        return _to_decimal(data.get(name))
    return _extract


# 우선순위 순서. 모두 없으면 0 (금액이 없다는 것을 결제 완료로 해석하지 않는다)
AMOUNT_FIELDS: Tuple[str, ...] = ("total_amount", "amount", "recurring_pre_tax_amount")
AMOUNT_EXTRACTORS: Tuple[Tuple[str, Callable[[Dict[str, Any]], Optional[Decimal]]], ...] = tuple(
    (name, _field_extractor(name)) for name in AMOUNT_FIELDS
)


def extract_amount(data: Dict[str, Any]) -> Decimal:
    for name, extractor in AMOUNT_EXTRACTORS:
        amount = extractor(data)
        if amount is not None:
            logger.debug("[DODO] amount taken from %s", name)
            return amount
    return Decimal(0)


def _metadata_value(metadata: Dict[str, Any], key: str) -> Optional[str]:
    value = metadata.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_payment_event(raw_body: Union[str, bytes]) -> PaymentEvent:
    """웹훅 본문을 PaymentEvent로 변환"""
    try:
        if isinstance(raw_body, bytes):
            raw_body = raw_body.decode("utf-8")
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedPayload(f"Invalid JSON payload: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedPayload("Webhook payload must be a JSON object")

    raw_type = payload.get("type")
    if not isinstance(raw_type, str) or not raw_type:
        raise MalformedPayload("Webhook payload is missing 'type'")

    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}
    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    return PaymentEvent(
        type=PaymentEventType.from_wire(raw_type),
        raw_type=raw_type,
        user_id=_metadata_value(metadata, "user_id"),
        plan_id=_metadata_value(metadata, "plan_id"),
        amount=extract_amount(data),
        data=data,
    )
