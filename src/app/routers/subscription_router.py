import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import settings
from core.factory import ServiceFactory
from core.responses import AuthorizationException, success_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])
security = HTTPBearer(auto_error=False)


def require_cron_secret(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> None:
    """CRON_SECRET 베어러 토큰 확인 (미설정이면 엔드포인트 비활성)"""
    expected = (settings.CRON_SECRET or "").strip()
    if not expected:
        raise AuthorizationException("만료 처리 엔드포인트가 비활성화되어 있습니다")
    provided = credentials.credentials if credentials else ""
    if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise AuthorizationException()


@router.post("/expire")
async def expire_subscriptions(_: None = Depends(require_cron_secret)):
    """기간이 끝난 유료 구독을 무료 요금제로 다운그레이드"""
    result = await ServiceFactory.get_entitlement_service().expire_subscriptions()

    processed = result.get("processed", 0)
    message = (
        f"Successfully processed {processed} expired subscriptions"
        if processed
        else "No expired subscriptions found"
    )
    return success_response(data=result, message=message)
