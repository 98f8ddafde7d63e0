from schoolhub.models.announcement import Announcement
from schoolhub.models.course import Course, Lecture
from schoolhub.models.environment import Country, Holiday, HolidayType, School
from schoolhub.models.file import File, FileType, ReferenceType, StudentReference
from schoolhub.models.grade import Grade
from schoolhub.models.question import Answer, AnswerOwnerType, Question
from schoolhub.models.tag import ALLOWED_COLOURS, Tag
from schoolhub.models.todo import Todo, TodoType
from schoolhub.models.user import Token, User, UserType
