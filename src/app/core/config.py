"""
애플리케이션 설정 관리
"""
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import validator
from pydantic_settings import BaseSettings


_FILE_PATH = Path(__file__).resolve()


def _collect_env_files(file_path: Path) -> tuple[Path, ...]:
    """환경 파일 후보를 가까운 디렉터리부터 수집"""

    collected: list[Path] = []
    seen: set[Path] = set()

    for directory in file_path.parents:
        for name in (".env", ".env.local"):
            candidate = directory / name
            if candidate.exists() and candidate not in seen:
                collected.append(candidate)
                seen.add(candidate)

    return tuple(collected)


_ENV_FILES = _collect_env_files(_FILE_PATH)


def _load_dotenv_files() -> None:
    """프로젝트 전체에서 활용할 .env 파일들을 순차적으로 로드"""

    for dotenv_path in _ENV_FILES:
        load_dotenv(dotenv_path, override=False)


_load_dotenv_files()

class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False

    # Supabase 설정 (웹훅은 서버 간 호출이므로 service role 키 사용)
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str

    # 로깅 설정
    LOG_LEVEL: str = "INFO"

    # Dodo Payments 웹훅 설정
    DODO_PAYMENTS_WEBHOOK_KEY: Optional[str] = None
    # true면 서명 검증 실패 시 401로 거부, false면 경고 로그만 남기고 계속 처리
    WEBHOOK_STRICT_VERIFY: bool = False
    # webhook-timestamp 허용 오차(초). 0이면 검사하지 않음
    WEBHOOK_TOLERANCE_SECONDS: int = 0

    # 프로필 저장소 호출 제한
    STORE_TIMEOUT_SECONDS: float = 10.0
    STORE_MAX_RETRIES: int = 1

    # 구독 만료 스케줄러
    ENABLE_SCHEDULER: bool = True
    SUBSCRIPTION_EXPIRY_INTERVAL_SECONDS: int = 3600
    # 수동 만료 처리 엔드포인트 보호용 토큰 (없으면 엔드포인트 비활성)
    CRON_SECRET: Optional[str] = None

    @validator('SUPABASE_URL')
    def validate_supabase_url(cls, v):
        if not v:
            raise ValueError('SUPABASE_URL은 필수입니다')
        return v

    @validator('SUPABASE_SERVICE_ROLE_KEY')
    def validate_supabase_service_role_key(cls, v):
        if not v:
            raise ValueError('SUPABASE_SERVICE_ROLE_KEY는 필수입니다')
        return v

    @validator('WEBHOOK_TOLERANCE_SECONDS', 'STORE_MAX_RETRIES')
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError('음수 값은 허용되지 않습니다')
        return v

    class Config:
        env_file = tuple(str(path) for path in _ENV_FILES) if _ENV_FILES else None
        case_sensitive = True
        extra = "allow"  # 추가 환경변수 허용

# 전역 설정 인스턴스
settings = Settings()
