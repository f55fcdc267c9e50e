from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api import deps
from app.api.v1.students import student_detail
from app.api.v1.teachers import teacher_detail
from app.core.database import get_db
from app.models import Class, ClassSubject, Student, StudentSubject, Teacher, User, UserRole

router = APIRouter()


@router.get("/my-profile")
def get_my_profile(
    current_user: User = Depends(deps.get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    if current_user.role == UserRole.student:
        student = db.query(Student).filter(Student.user_id == current_user.id).first()
        if student:
            return {"role": "student", "profile": student_detail(student)}
    elif current_user.role == UserRole.teacher:
        teacher = db.query(Teacher).filter(Teacher.user_id == current_user.id).first()
        if teacher:
            return {"role": "teacher", "profile": teacher_detail(teacher)}
    else:
        return {
            "role": current_user.role.value,
            "profile": {
                "id": current_user.id,
                "email": current_user.email,
                "first_name": current_user.first_name,
                "last_name": current_user.last_name,
            },
        }
    raise HTTPException(status_code=404, detail="Profile not found")


@router.get("/my-class")
def get_my_class(
    student: Student = Depends(deps.get_current_student),
    db: Session = Depends(get_db),
):
    if not student.class_id:
        raise HTTPException(status_code=404, detail="You are not assigned to a class yet")
    cls = db.query(Class).filter(Class.id == student.class_id).first()

    return {
        "id": cls.id,
        "name": cls.display_name,
        "academic_year": cls.academic_year,
        "class_teacher": f"{cls.teacher.first_name} {cls.teacher.last_name}" if cls.teacher else None,
        "classmates": [
            {"id": s.id, "student_id": s.student_id, "name": f"{s.first_name} {s.last_name}"}
            for s in sorted(cls.students, key=lambda s: (s.last_name, s.first_name))
            if s.id != student.id
        ],
        "subjects": [
            {
                "name": cs.subject.name,
                "teacher": f"{cs.teacher.first_name} {cs.teacher.last_name}" if cs.teacher else "N/A",
            }
            for cs in cls.class_subjects
        ],
    }


@router.get("/my-subjects")
def get_my_subjects(
    academic_year: Optional[int] = None,
    student: Student = Depends(deps.get_current_student),
    db: Session = Depends(get_db),
):
    academic_year = academic_year or date.today().year
    rows = (
        db.query(StudentSubject)
        .filter(
            StudentSubject.student_id == student.id,
            StudentSubject.academic_year == academic_year,
        )
        .all()
    )
    return {
        "academic_year": academic_year,
        "subjects": sorted(
            ({"id": row.subject.id, "name": row.subject.name} for row in rows),
            key=lambda s: s["name"],
        ),
    }


@router.get("/teacher/classes")
def get_teacher_classes(
    teacher: Teacher = Depends(deps.get_current_teacher),
    db: Session = Depends(get_db),
):
    led = db.query(Class).filter(Class.teacher_id == teacher.id).all()
    taught = db.query(ClassSubject).filter(ClassSubject.teacher_id == teacher.id).all()
    return {
        "class_teacher_of": [
            {
                "id": cls.id,
                "name": cls.display_name,
                "academic_year": cls.academic_year,
                "student_count": len(cls.students),
            }
            for cls in led
        ],
        "teaching": [
            {
                "class_id": cs.class_id,
                "class_name": cs.class_.display_name,
                "subject_id": cs.subject_id,
                "subject_name": cs.subject.name,
            }
            for cs in taught
        ],
    }
