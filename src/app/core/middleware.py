"""
전역 예외 처리 미들웨어
"""
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
import logging

from core.responses import error_response, BusinessException, WebhookException

logger = logging.getLogger(__name__)

# 결제사 서버 간 콜백이므로 와일드카드 origin 허용
WEBHOOK_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, "
        "webhook-id, webhook-signature, webhook-timestamp"
    ),
}

async def webhook_exception_handler(request: Request, exc: WebhookException):
    """웹훅 예외 처리기 - 결제사가 기대하는 {"error": ...} 본문 유지"""
    if exc.status_code >= 500:
        logger.error(f"[DODO] webhook processing error: {exc.message}")
    else:
        logger.warning(f"[DODO] webhook rejected: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "error_code": exc.error_code},
        headers=WEBHOOK_CORS_HEADERS,
    )

async def business_exception_handler(request: Request, exc: BusinessException):
    """비즈니스 예외 처리기"""
    logger.warning(f"Business exception: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            message=exc.message,
            error_code=exc.error_code
        ).model_dump()
    )

async def http_exception_handler_custom(request: Request, exc: HTTPException):
    """HTTP 예외 처리기"""
    logger.warning(f"HTTP exception: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            message=exc.detail,
            error_code="HTTP_ERROR"
        ).model_dump()
    )

async def general_exception_handler(request: Request, exc: Exception):
    """일반 예외 처리기"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    if request.url.path.startswith("/api/v1/webhooks"):
        return JSONResponse(
            status_code=500,
            content={"error": str(exc) or "Webhook processing failed"},
            headers=WEBHOOK_CORS_HEADERS,
        )

    return JSONResponse(
        status_code=500,
        content=error_response(
            message="내부 서버 오류가 발생했습니다",
            error_code="INTERNAL_SERVER_ERROR"
        ).model_dump()
    )

def setup_exception_handlers(app):
    """예외 처리기 설정"""
    app.add_exception_handler(WebhookException, webhook_exception_handler)
    app.add_exception_handler(BusinessException, business_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler_custom)
    app.add_exception_handler(Exception, general_exception_handler)
