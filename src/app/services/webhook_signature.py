"""
Standard Webhooks 서명 검증 (Dodo Payments)

서명 대상은 `{webhook-id}.{webhook-timestamp}.{원본 본문}`이며, `whsec_` 접두사를 뗀 뒤
base64 디코딩한 시크릿으로 HMAC-SHA256 서명한다.
`webhook-signature` 헤더에는 키 교체를 위해 공백으로 구분된 `v1,<base64>` 후보가 여러 개 올 수 있다.
"""
import base64
import binascii
import hashlib
import hmac
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"


def _decode_secret(secret: str) -> bytes:
    key = secret[len(SECRET_PREFIX):] if secret.startswith(SECRET_PREFIX) else secret
    return base64.b64decode(key, validate=True)


def _compute_signature(payload: bytes, webhook_id: str, webhook_timestamp: str, key: bytes) -> str:
    signed_content = f"{webhook_id}.{webhook_timestamp}.".encode("utf-8") + payload
    digest = hmac.new(key, signed_content, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def _is_fresh(webhook_timestamp: str, tolerance_seconds: int, now: Optional[float]) -> bool:
    try:
        sent_at = int(webhook_timestamp)
    except (TypeError, ValueError):
        logger.warning("[DODO] webhook-timestamp is not an integer: %r", webhook_timestamp)
        return False

    current = time.time() if now is None else now
    if abs(current - sent_at) > tolerance_seconds:
        logger.warning("[DODO] webhook-timestamp outside tolerance (%ss)", tolerance_seconds)
        return False
    return True


def sign(payload: bytes, webhook_id: str, webhook_timestamp: str, secret: str) -> str:
    """주어진 메시지의 `v1,<signature>` 후보 생성 (테스트/도구용)"""
    signature = _compute_signature(payload, webhook_id, webhook_timestamp, _decode_secret(secret))
    return f"{SIGNATURE_VERSION},{signature}"


def verify(
    payload: bytes,
    webhook_id: str,
    webhook_timestamp: str,
    signature_header: str,
    secret: str,
    *,
    tolerance_seconds: int = 0,
    now: Optional[float] = None,
) -> bool:
    """서명 헤더를 원본 본문과 대조

    예외를 던지지 않는다. 디코딩/암호 오류는 모두 "검증 실패"로 취급.
    tolerance_seconds > 0이면 허용 범위를 벗어난 타임스탬프도 거부한다.
    """
    try:
        if isinstance(payload, str):
            payload = payload.encode("utf-8")

        if tolerance_seconds > 0 and not _is_fresh(webhook_timestamp, tolerance_seconds, now):
            return False

        expected = _compute_signature(payload, webhook_id, webhook_timestamp, _decode_secret(secret))

        for candidate in signature_header.split(" "):
            version, sep, provided = candidate.partition(",")
            if not sep or version != SIGNATURE_VERSION:
                continue
            # base64 서명은 ASCII뿐이므로 그 밖의 문자가 섞인 후보는 불일치
            if not provided.isascii():
                continue
            if hmac.compare_digest(provided.encode("ascii"), expected.encode("ascii")):
                return True

        return False
    except (binascii.Error, ValueError, TypeError, AttributeError) as e:
        logger.error(f"[DODO] signature verification error: {e}")
        return False
