"""
서비스 인터페이스 정의
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, Optional, List
from datetime import datetime


@dataclass
class SubscriptionUpdate:
    """profiles 행에 기록할 구독 필드 (None인 필드는 건드리지 않음)"""
    plan: str
    words_limit: int
    updated_at: datetime
    words_used: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    clear_dates: bool = False

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            'subscription_plan': self.plan,
            'words_limit': self.words_limit,
            'updated_at': self.updated_at.isoformat(),
        }
        if self.words_used is not None:
            record['words_used'] = self.words_used
        if self.clear_dates:
            record['subscription_start_date'] = None
            record['subscription_end_date'] = None
        else:
            if self.start_date is not None:
                record['subscription_start_date'] = self.start_date.isoformat()
            if self.end_date is not None:
                record['subscription_end_date'] = self.end_date.isoformat()
        return record


class IProfileStore(ABC):
    """사용자 프로필 저장소 인터페이스"""

    @abstractmethod
    async def update_subscription(self, user_id: str, update: SubscriptionUpdate) -> Dict[str, Any]:
        """구독 상태 갱신. 실패하거나 일치하는 행이 없으면 StoreUpdateFailed"""
        pass

    @abstractmethod
    async def get_expired_subscriptions(self, now: datetime) -> List[Dict[str, Any]]:
        """만료일이 지난 유료 구독 프로필 목록"""
        pass


class IEntitlementService(ABC):
    """구독 권한 조정 서비스 인터페이스"""

    @abstractmethod
    async def reconcile(self, event) -> Any:
        """결제 이벤트를 구독 상태에 반영"""
        pass

    @abstractmethod
    async def expire_subscriptions(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """만료된 구독 일괄 다운그레이드"""
        pass
