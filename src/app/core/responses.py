"""
공통 응답 모델 및 예외 클래스
"""
from typing import Generic, TypeVar, Optional, Any
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')

class APIResponse(BaseModel, Generic[T]):
    """표준 API 응답 모델"""
    status: str  # "success" or "error"
    data: Optional[T] = None
    message: Optional[str] = None
    error_code: Optional[str] = None

# 커스텀 예외 클래스들
class BusinessException(Exception):
    """비즈니스 로직 예외"""
    def __init__(self, message: str, error_code: str = None, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)

class AuthorizationException(BusinessException):
    """권한 관련 예외"""
    def __init__(self, message: str = "접근 권한이 없습니다"):
        super().__init__(message, "ACCESS_DENIED", 403)


# 웹훅 처리 예외들. 응답 본문은 {"error": message} 형태로 내려간다.
class WebhookException(BusinessException):
    """결제 웹훅 처리 예외"""


class SignatureInvalid(WebhookException):
    """웹훅 서명 검증 실패 (strict 모드에서만 발생)"""
    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message, "SIGNATURE_INVALID", 401)


class MalformedPayload(WebhookException):
    """JSON 파싱 실패 또는 type 필드 누락"""
    def __init__(self, message: str = "Malformed webhook payload"):
        super().__init__(message, "MALFORMED_PAYLOAD", 500)


class MissingMetadata(WebhookException):
    """활성화 이벤트에 user_id / plan_id 누락"""
    def __init__(self, message: str = "Missing required metadata"):
        super().__init__(message, "MISSING_METADATA", 400)


class UnknownPlan(WebhookException):
    """카탈로그에 없는 plan_id"""
    def __init__(self, plan_id: str):
        super().__init__(f"Unknown plan ID: {plan_id}", "UNKNOWN_PLAN", 500)
        self.plan_id = plan_id


class StoreUpdateFailed(WebhookException):
    """프로필 저장소 갱신 실패"""
    def __init__(self, user_id: str, message: str = None):
        msg = message or f"Failed to update profile for user {user_id}"
        super().__init__(msg, "STORE_UPDATE_FAILED", 500)
        self.user_id = user_id

# 응답 헬퍼 함수들
def success_response(data: Any = None, message: str = "성공") -> APIResponse:
    """성공 응답 생성"""
    return APIResponse(status="success", data=data, message=message)

def error_response(
    message: str = "오류가 발생했습니다",
    error_code: str = None,
    data: Any = None
) -> APIResponse:
    """오류 응답 생성"""
    return APIResponse(
        status="error",
        message=message,
        error_code=error_code,
        data=data
    )
