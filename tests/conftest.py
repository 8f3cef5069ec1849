import os
import tempfile

# 앱(settings / engine) import 전에 테스트용 환경 변수를 먼저 설정
_SQLITE_PATH = os.path.join(tempfile.gettempdir(), "community_portal_test.db")
TEST_DB_URL = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{_SQLITE_PATH}"

os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret-key")
os.environ["STATUS_POLL_ENABLED"] = "false"
os.environ["FRONTEND_URL"] = "http://localhost:5173"
os.environ["DISCORD_CLIENT_ID"] = "test-client-id"
os.environ["DISCORD_CLIENT_SECRET"] = "test-client-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.main import app as fastapi_app  # noqa: E402
from app.core.deps import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import engine  # noqa: E402

# ✅ 모델 import (Base.metadata에 테이블 등록)
import app.models  # noqa: F401, E402


# 서버 상태 폴러 / WebSocket 은 SessionLocal 을 직접 쓰므로 같은 engine 을 공유
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """테스트 전체 시작/종료 때만 스키마 생성/삭제"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables():
    """각 테스트마다 데이터 초기화 (테이블은 유지, row만 삭제)"""
    # SQLite 는 TRUNCATE 가 없으므로 FK 역순으로 DELETE
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def db():
    """테스트에서 직접 DB 조작할 때 쓰는 세션"""
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
