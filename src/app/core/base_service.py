"""
서비스 기본 클래스
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Any, Optional

from core.interfaces import IProfileStore


class BaseService:
    """모든 서비스의 기본 클래스"""

    def __init__(self, store: IProfileStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logging.getLogger(self.__class__.__name__)

    def now(self) -> datetime:
        """현재 시각 (UTC, 테스트에서 clock 주입 가능)"""
        return self._clock()

    def log_operation(self, operation: str, user_id: str = None, data: Dict[str, Any] = None):
        """작업 로깅"""
        log_data = {
            "operation": operation,
            "user_id": user_id,
            **(data or {})
        }
        self.logger.info(f"Operation: {operation} user_id={user_id}", extra={"operation_data": log_data})
