"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- JWT 인증 관련 시크릿 및 만료 정책
- 쿠키 보안 옵션
- CORS 허용 도메인 목록
- Discord OAuth 연동 정보
- 게임 서버 상태 폴링(주기 / 타임아웃 / 기본값)
- 초기 관리자 계정(bootstrap) 정보

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 설정 값은 런타임 중 변경되지 않는 불변 객체로 취급
- 관리자가 화면에서 바꾸는 값(사이트 설정)은 여기가 아니라 site_settings 테이블에서 관리

관련 파일:
- app.main               : CORS / 로깅 / 스케줄러 초기화 시 설정 사용
- app.core.security      : JWT 시크릿 / 만료 설정 사용
- app.db.session         : DATABASE_URL 사용
- app.services.discord   : OAuth 클라이언트 정보 사용
- app.services.server_status : 게임 서버 주소 / 폴링 주기 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# .env 파일에 정의된 환경 변수를 로드하는 설정 클래스
# extra="ignore" 옵션으로 정의되지 않은 환경 변수는 무시
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    SECRET_KEY: str
    REFRESH_SECRET_KEY: str
    ALGORITHM: str = "HS256"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # 쿠키/배포 옵션
    # - COOKIE_SECURE: HTTPS 환경에서만 True 권장
    # - COOKIE_SAMESITE: CSRF 완화를 위해 "lax" 기본값
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"
    COOKIE_DOMAIN: str | None = None

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # OAuth 콜백 이후 리다이렉트할 프론트엔드 주소
    FRONTEND_URL: str = "http://localhost:5173"

    # Discord OAuth
    DISCORD_CLIENT_ID: str = ""
    DISCORD_CLIENT_SECRET: str = ""
    DISCORD_REDIRECT_URI: str = "http://localhost:8000/api/auth/discord/callback"
    DISCORD_API_BASE: str = "https://discord.com/api"
    DISCORD_SCOPE: str = "identify"
    OAUTH_TIMEOUT_SECONDS: float = 5.0

    # 게임 서버 상태 폴링
    GAME_SERVER_HOST: str = "127.0.0.1"
    GAME_SERVER_PORT: int = 30120
    STATUS_POLL_ENABLED: bool = True
    STATUS_POLL_INTERVAL_SECONDS: int = 30
    STATUS_FETCH_TIMEOUT_SECONDS: float = 3.0
    STATUS_DEFAULT_SERVER_NAME: str = "Community Roleplay"
    STATUS_DEFAULT_MAX_PLAYERS: int = 128

    LOG_LEVEL: str = "INFO"

    # 초기 관리자 계정 (scripts/create_admin.py 에서만 사용)
    BOOTSTRAP_ADMIN_USERNAME: str | None = None
    BOOTSTRAP_ADMIN_PASSWORD: str | None = None

    @property
    def discord_enabled(self) -> bool:
        return bool(self.DISCORD_CLIENT_ID and self.DISCORD_CLIENT_SECRET)

    @property
    def game_server_base_url(self) -> str:
        return f"http://{self.GAME_SERVER_HOST}:{self.GAME_SERVER_PORT}"


# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
# 실행 시 한 번만 생성됨
settings = Settings()
