# Base.metadata 에 모든 테이블을 등록하기 위한 import
from eventpay.models.user import User, Role  # noqa: F401
from eventpay.models.event import Event, Participation  # noqa: F401
from eventpay.models.payment import Payment  # noqa: F401
