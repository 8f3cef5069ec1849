"""

초기 관리자(ADMIN) 계정 생성 스크립트.

- 서버 최초 세팅 시 한 번 실행하는 용도
- .env에 정의된 BOOTSTRAP_ADMIN_USERNAME / BOOTSTRAP_ADMIN_PASSWORD 를 읽어
  일반 users 테이블에 ADMIN 계정을 생성한다.
- 같은 username 의 계정이 이미 있으면
  ADMIN 이 아닐 경우에만 ADMIN 으로 승격하고, 비밀번호는 건드리지 않는다.

사용 목적:
- 고정된 우회 로그인 대신, 감사 가능한 실제 관리자 계정으로 운영을 시작하기 위함

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.core.config import settings
from app.db.session import SessionLocal
from app.models.user import User, Role
from app.core.security import get_password_hash


def main():
    username = settings.BOOTSTRAP_ADMIN_USERNAME
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if not username or not password:
        raise SystemExit("BOOTSTRAP_ADMIN_USERNAME and BOOTSTRAP_ADMIN_PASSWORD must be set")
    if len(password) < 8:
        raise SystemExit("BOOTSTRAP_ADMIN_PASSWORD must be at least 8 characters")

    db = SessionLocal()
    try:
        existing = db.scalar(select(User).where(User.username == username))
        if existing:
            if existing.role == Role.ADMIN:
                print(f"ADMIN '{username}' already exists. Skip creation.")
                return
            existing.role = Role.ADMIN
            db.commit()
            print(f"Promoted existing user '{username}' to ADMIN")
            return

        user = User(
            username=username,
            password_hash=get_password_hash(password),
            role=Role.ADMIN,
        )
        db.add(user)
        db.commit()

        print(f"ADMIN created: {username}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
