"""
첫 ADMIN 계정 생성 스크립트.

가입 API(/auth/register)는 항상 MEMBER 를 만들기 때문에
이벤트 / 정산 관리 API를 쓸 첫 관리자 계정은 이 스크립트로 만든다.

환경 변수 (.env):
- ADMIN_EMAIL     (필수)
- ADMIN_PASSWORD  (필수)
- ADMIN_NAME      (기본값 "Admin")

실행:
    python -m scripts.create_admin

- ADMIN 이 이미 있으면 아무것도 하지 않음
- 같은 이메일의 MEMBER 가 있으면 승격하지 않고 에러

"""

import logging
import os

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.orm import Session

from eventpay.core.security import get_password_hash
from eventpay.db.session import SessionLocal
from eventpay.models.user import Role, User

logger = logging.getLogger("scripts.create_admin")


def create_admin(db: Session, *, email: str, password: str, name: str = "Admin") -> User | None:
    if db.scalar(select(User).where(User.role == Role.ADMIN)):
        logger.info("ADMIN already exists, skipping")
        return None

    if db.scalar(select(User).where(User.email == email)):
        raise RuntimeError(f"{email} is already registered as a non-admin user")

    admin = User(email=email, password_hash=get_password_hash(password), name=name, role=Role.ADMIN)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("ADMIN created: %s", email)
    return admin


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    db = SessionLocal()
    try:
        create_admin(
            db,
            email=os.environ["ADMIN_EMAIL"],
            password=os.environ["ADMIN_PASSWORD"],
            name=os.environ.get("ADMIN_NAME", "Admin"),
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
