"""
logger.py

애플리케이션 로깅 초기화.

- 표준 logging 모듈 사용, 서버 시작 시 setup_logging() 한 번만 호출
- 레벨은 settings.LOG_LEVEL 로 제어
- 각 모듈은 logging.getLogger(__name__) 으로 로거를 얻어 사용

"""

import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging() -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # uvicorn --reload 등으로 여러 번 호출돼도 핸들러가 중복되지 않도록 정리
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # 외부 라이브러리의 과도한 로그는 한 단계 낮춤
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
