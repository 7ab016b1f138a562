from fastapi import FastAPI
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import uvicorn

from core.config import settings
from core.factory import ServiceFactory
from core.middleware import setup_exception_handlers
from core.scheduler import initialize_scheduler, cleanup_scheduler
from core.responses import success_response

from routers import dodo_router, subscription_router

# 로깅 설정
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 서비스 의존성 등록 (외부 클라이언트는 첫 사용 시 생성)
ServiceFactory.configure_dependencies()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # 구독 만료 스케줄러 시작
    if settings.ENABLE_SCHEDULER:
        try:
            await initialize_scheduler(
                ServiceFactory.get_entitlement_service(),
                settings.SUBSCRIPTION_EXPIRY_INTERVAL_SECONDS,
            )
        except Exception as e:
            logger.error(f"백그라운드 스케줄러 초기화 실패: {e}")

    yield

    # 백그라운드 스케줄러 종료
    try:
        await cleanup_scheduler()
    except Exception as e:
        logger.error(f"백그라운드 스케줄러 종료 실패: {e}")

app = FastAPI(
    title="Content Billing Webhook Server",
    description="Payment webhook reconciliation for subscription word quotas",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG
)

# 예외 처리 미들웨어 설정
setup_exception_handlers(app)

@app.get("/health")
async def health_check():
    # DB 헬스체크를 수행하지 않고 정적 상태만 반환
    return success_response(
        data={
            "database": {"checked": False},
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": "1.0.0",
            "environment": "development" if settings.DEBUG else "production"
        },
        message="헬스 체크(DB 미검사)"
    )

# 라우터 등록
app.include_router(dodo_router.router)  # Dodo Payments 웹훅 라우터
app.include_router(subscription_router.router)  # 구독 만료 처리 라우터

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
