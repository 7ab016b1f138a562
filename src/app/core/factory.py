"""
서비스 팩토리 - 의존성 주입 설정
"""
from supabase import create_client
import logging

from core.config import Settings, settings as default_settings
from core.container import container
from core.interfaces import IEntitlementService, IProfileStore
from core.plan_catalog import PlanCatalog
from database_helper import DatabaseHelper
from services.entitlement_service import EntitlementService
from services.webhook_processor import DodoWebhookProcessor, WebhookConfig

logger = logging.getLogger(__name__)

class ServiceFactory:
    """서비스 의존성 등록 및 초기화"""

    @staticmethod
    def build_webhook_config(config: Settings) -> WebhookConfig:
        secret = (config.DODO_PAYMENTS_WEBHOOK_KEY or "").strip() or None
        if not secret:
            logger.warning("[DODO] DODO_PAYMENTS_WEBHOOK_KEY가 설정되지 않아 서명 검증을 수행할 수 없습니다.")
        return WebhookConfig(
            secret=secret,
            strict_verify=config.WEBHOOK_STRICT_VERIFY,
            tolerance_seconds=config.WEBHOOK_TOLERANCE_SECONDS,
        )

    @staticmethod
    def configure_dependencies(config: Settings = None):
        """의존성 주입 컨테이너 설정 (이미 등록된 항목은 덮어쓰지 않음)"""
        config = config or default_settings

        if not container.is_registered(IProfileStore):
            # 외부 클라이언트는 첫 조회 시 생성
            def _build_store() -> IProfileStore:
                supabase_admin = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
                return DatabaseHelper(
                    supabase_admin,
                    timeout_seconds=config.STORE_TIMEOUT_SECONDS,
                    max_retries=config.STORE_MAX_RETRIES,
                )
            container.register_lazy(IProfileStore, _build_store)

        if not container.is_registered(PlanCatalog):
            container.register_singleton(PlanCatalog, PlanCatalog())

        if not container.is_registered(IEntitlementService):
            container.register_lazy(
                IEntitlementService,
                lambda: EntitlementService(container.get(IProfileStore), container.get(PlanCatalog)),
            )

        if not container.is_registered(DodoWebhookProcessor):
            container.register_lazy(
                DodoWebhookProcessor,
                lambda: DodoWebhookProcessor(
                    ServiceFactory.build_webhook_config(config),
                    container.get(IEntitlementService),
                ),
            )

    @staticmethod
    def get_entitlement_service() -> IEntitlementService:
        """구독 권한 서비스 조회"""
        return container.get(IEntitlementService)

    @staticmethod
    def get_webhook_processor() -> DodoWebhookProcessor:
        """웹훅 처리기 조회"""
        return container.get(DodoWebhookProcessor)
