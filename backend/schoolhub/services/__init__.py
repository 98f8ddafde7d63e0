from schoolhub.services.announcement_service import AnnouncementService
from schoolhub.services.base import ServiceResult
from schoolhub.services.course_service import CourseService
from schoolhub.services.email_service import EmailService
from schoolhub.services.environment_service import EnvironmentService
from schoolhub.services.grade_service import GradeService
from schoolhub.services.tag_service import TagService
from schoolhub.services.todo_service import TodoService
from schoolhub.services.user_service import UserService
