"""Stream-based subject allocation for the FET phase (grades 10-12).

The class name of a grade 10-12 class is its stream letter. Each stream has a
fixed set of compulsory and elective subjects; the subjects are looked up by
name, so a school only gets the subjects it has actually created.
"""
import logging
import re
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.models.lms import Class, Subject, StudentSubject
from app.schemas.lms import SubjectAssignmentResult

logger = logging.getLogger(__name__)

FET_GRADE_PATTERN = re.compile(r"^Grade (10|11|12)$")
STREAM_PATTERN = re.compile(r"^[ABCD]$")

BASE_COMPULSORY_SUBJECTS = ["Home Language", "First Additional Language", "Life Orientation"]

STREAM_MATHEMATICS: Dict[str, str] = {
    "A": "Mathematics",
    "B": "Mathematics",
    "C": "Mathematics",
    "D": "Mathematical Literacy",
}

STREAM_ELECTIVES: Dict[str, List[str]] = {
    "A": ["Accounting", "Business Studies", "Economics"],  # Commerce
    "B": ["Accounting", "Physical Sciences", "Life Sciences"],  # Commerce Technical
    "C": ["Physical Sciences", "Life Sciences", "Geography"],  # Technical
    "D": ["History", "Geography", "Life Sciences"],  # Humanities
}


class SubjectAssignmentError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def subjects_for_stream(stream: str) -> List[str]:
    """Compulsory subjects first, then the stream electives."""
    if not STREAM_PATTERN.match(stream or ""):
        raise SubjectAssignmentError("Invalid class stream")
    return BASE_COMPULSORY_SUBJECTS + [STREAM_MATHEMATICS[stream]] + STREAM_ELECTIVES[stream]


def assign_subjects_to_student(
    db: Session,
    student_id: UUID,
    class_id: UUID,
    academic_year: Optional[int] = None,
) -> SubjectAssignmentResult:
    """Add the stream's subjects to the student for the academic year.

    Rows are added to the session and flushed; committing is left to the
    caller. Subjects already held for the year are skipped, so running this
    twice assigns nothing the second time.
    """
    cls = (
        db.query(Class)
        .options(joinedload(Class.grade))
        .filter(Class.id == class_id)
        .first()
    )
    if not cls:
        raise SubjectAssignmentError("Class not found")

    grade_name = cls.grade.name if cls.grade else None
    if not grade_name or not FET_GRADE_PATTERN.match(grade_name):
        return SubjectAssignmentResult(
            success=True, message="No auto-assignment needed for this grade"
        )

    wanted = subjects_for_stream(cls.name)

    subject_map = {s.name: s.id for s in db.query(Subject.id, Subject.name).all()}

    if academic_year is None:
        academic_year = date.today().year

    existing_ids = {
        row.subject_id
        for row in db.query(StudentSubject.subject_id).filter(
            StudentSubject.student_id == student_id,
            StudentSubject.academic_year == academic_year,
        )
    }

    to_assign = [
        name
        for name in wanted
        if name in subject_map and subject_map[name] not in existing_ids
    ]
    missing = [name for name in wanted if name not in subject_map]
    if missing:
        logger.warning("Subjects not set up, skipping: %s", ", ".join(missing))

    if not to_assign:
        return SubjectAssignmentResult(
            success=True, message="Student already has all required subjects assigned"
        )

    for name in to_assign:
        db.add(
            StudentSubject(
                student_id=student_id,
                subject_id=subject_map[name],
                academic_year=academic_year,
            )
        )
    db.flush()

    logger.info(
        "Assigned %d subjects to student %s for %s", len(to_assign), student_id, academic_year
    )
    return SubjectAssignmentResult(
        success=True,
        message=f"Successfully assigned {len(to_assign)} subjects to the student",
        assigned_subjects=to_assign,
    )


def try_assign_subjects(
    db: Session,
    student_id: UUID,
    class_id: UUID,
    academic_year: Optional[int] = None,
) -> SubjectAssignmentResult:
    """Like assign_subjects_to_student but reports failure instead of raising.

    Used when a student is placed in a class: the placement stands even if
    the class cannot be mapped to a stream.
    """
    try:
        return assign_subjects_to_student(db, student_id, class_id, academic_year)
    except SubjectAssignmentError as e:
        logger.error("Error assigning subjects to student %s: %s", student_id, e.message)
        return SubjectAssignmentResult(success=False, message=f"Failed to assign subjects: {e.message}")
