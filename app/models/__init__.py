from app.core.database import Base
from app.models.auth import User, UserSession
from app.models.users import UserRole, Student, Teacher, Parent, StudentParent
from app.models.applications import Application, ApplicationStatus
from app.models.lms import (
    Grade,
    Class,
    Subject,
    ClassSubject,
    TeacherSubject,
    StudentSubject,
    ClassRepresentative,
    LearningMaterial,
)
from app.models.communication import Notification
from app.models.timetable import Timetable
from app.models.website import Event
from app.models.marks import Mark
from app.models.achievements import Achievement, AchievementType
