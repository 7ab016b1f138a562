"""
요금제별 사용량 한도 관리

plan_id는 결제사 쪽 상품 설정(metadata.plan_id)과 정확히 일치해야 한다 (소문자, 대소문자 구분).
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from core.responses import UnknownPlan

FREE_PLAN = "free"
FREE_WORDS_LIMIT = 500
SUBSCRIPTION_TERM_DAYS = 30


@dataclass(frozen=True)
class PlanEntitlement:
    """요금제별 권한"""
    plan_id: str
    words_limit: int
    display_name: str

    @property
    def plan_name(self) -> str:
        """profiles.subscription_plan에 저장되는 이름"""
        return self.display_name.lower()


DEFAULT_PLANS = (
    PlanEntitlement(plan_id="basic", words_limit=50000, display_name="Basic"),
    PlanEntitlement(plan_id="pro", words_limit=100000, display_name="Pro"),
    PlanEntitlement(plan_id="enterprise", words_limit=200000, display_name="Enterprise"),
)


class PlanCatalog:
    """plan_id -> PlanEntitlement 조회 (I/O 없음)"""

    def __init__(self, entitlements: Iterable[PlanEntitlement] = DEFAULT_PLANS):
        self._plans: Dict[str, PlanEntitlement] = {}
        for entitlement in entitlements:
            if entitlement.words_limit <= 0:
                raise ValueError(f"words_limit must be positive for plan {entitlement.plan_id}")
            if entitlement.plan_id in self._plans:
                raise ValueError(f"duplicate plan id: {entitlement.plan_id}")
            self._plans[entitlement.plan_id] = entitlement

    def lookup(self, plan_id: Optional[str]) -> Optional[PlanEntitlement]:
        if not plan_id:
            return None
        return self._plans.get(plan_id)

    def require(self, plan_id: str) -> PlanEntitlement:
        """활성화 경로용 조회. 모르는 plan_id는 기본값으로 대체하지 않고 거부한다."""
        entitlement = self.lookup(plan_id)
        if entitlement is None:
            raise UnknownPlan(plan_id)
        return entitlement

    def plan_ids(self) -> List[str]:
        return list(self._plans.keys())
