"""
base.py

ORM Base 와 공통 MetaData.

- 제약 조건 이름 규칙을 MetaData 에 고정하여
  마이그레이션(alembic/versions)과 모델의 이름이 항상 같도록 유지
- 모델에서 이름을 직접 준 제약(uq_payments_user_month 등)은 그대로 사용

"""

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))
