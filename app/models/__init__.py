# Base.metadata 에 모든 테이블을 등록하기 위한 import 모음
# (alembic env.py / 테스트 conftest 에서 `import app.models` 로 사용)
from app.models.user import User, Role, PRIVILEGED_ROLES  # noqa: F401
from app.models.admin_log import AdminActionLog, AdminAction  # noqa: F401
from app.models.application import StaffApplication, ApplicationStatus  # noqa: F401
from app.models.ticket import Ticket, TicketReply, TicketStatus, TicketDepartment, TicketPriority  # noqa: F401
from app.models.news import NewsArticle, NewsCategory  # noqa: F401
from app.models.guideline import Guideline  # noqa: F401
from app.models.staff import StaffMember  # noqa: F401
from app.models.media import MediaItem  # noqa: F401
from app.models.character import Character  # noqa: F401
from app.models.settings import SiteSetting, UserSetting, ServerStatusCache, ServerStatSample  # noqa: F401
