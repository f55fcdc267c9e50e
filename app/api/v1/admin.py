from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api import deps
from app.core.database import get_db
from app.models import (
    Achievement,
    Application,
    ApplicationStatus,
    Class,
    ClassRepresentative,
    ClassSubject,
    Grade,
    Mark,
    Student,
    StudentSubject,
    Subject,
    Teacher,
    TeacherSubject,
    Timetable,
)
from app.models.auth import User
from app.schemas.applications import ApplicationResponse
from app.schemas.dashboard import DashboardOverviewResponse, DashboardStatsResponse
from app.schemas.lms import (
    AddStudentToClass,
    ClassCreate,
    ClassDetailResponse,
    ClassResponse,
    ClassStudentItem,
    ClassSubjectItem,
    ClassSubjectsUpdate,
    ClassUpdate,
    GradeCreate,
    GradeResponse,
    RepresentativeAssign,
    RepresentativeItem,
    SubjectCreate,
    SubjectResponse,
    SubjectTeacherAssign,
    SubjectUpdate,
)
from app.services.notifications import notify, visible_to
from app.services.subject_assignment import try_assign_subjects

router = APIRouter(dependencies=[Depends(deps.require_admin)])


def _full_name(person) -> Optional[str]:
    return f"{person.first_name} {person.last_name}".strip() if person else None


def _get_class(db: Session, class_id: UUID) -> Class:
    cls = db.query(Class).filter(Class.id == class_id).first()
    if not cls:
        raise HTTPException(status_code=404, detail="Class not found")
    return cls


@router.get("/dashboard/overview", response_model=DashboardOverviewResponse)
def get_dashboard_overview(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    stats = DashboardStatsResponse(
        total_students=db.query(Student).count(),
        total_teachers=db.query(Teacher).count(),
        total_classes=db.query(Class).filter(Class.academic_year == date.today().year).count(),
        pending_applications=db.query(Application)
        .filter(Application.status == ApplicationStatus.pending)
        .count(),
        unread_notifications=visible_to(db, current_user.id).filter_by(is_read=False).count(),
    )
    recent = (
        db.query(Application)
        .order_by(Application.created_at.desc())
        .limit(5)
        .all()
    )
    return {
        "stats": stats,
        "recent_applications": [ApplicationResponse.model_validate(a) for a in recent],
    }


# --- Grades ---


@router.get("/grades", response_model=List[GradeResponse])
def get_grades(db: Session = Depends(get_db)):
    return db.query(Grade).order_by(Grade.level, Grade.name).all()


@router.post("/grades", response_model=GradeResponse, status_code=201)
def create_grade(grade_in: GradeCreate, db: Session = Depends(get_db)):
    if db.query(Grade).filter(Grade.name == grade_in.name).first():
        raise HTTPException(status_code=409, detail="Grade already exists")
    grade = Grade(**grade_in.model_dump())
    db.add(grade)
    db.commit()
    db.refresh(grade)
    return grade


# --- Classes ---


@router.get("/classes", response_model=List[ClassResponse])
def get_classes(
    academic_year: Optional[int] = None,
    grade_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Class)
    if academic_year:
        query = query.filter(Class.academic_year == academic_year)
    if grade_id:
        query = query.filter(Class.grade_id == grade_id)
    return query.order_by(Class.academic_year.desc(), Class.name).all()


def _check_class_unique(
    db: Session,
    name: str,
    grade_id: UUID,
    academic_year: int,
    teacher_id: Optional[UUID],
    exclude_id: Optional[UUID] = None,
):
    query = db.query(Class).filter(
        Class.name == name,
        Class.grade_id == grade_id,
        Class.academic_year == academic_year,
    )
    if exclude_id:
        query = query.filter(Class.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=409,
            detail="A class with this name already exists for the selected grade and academic year.",
        )
    if teacher_id:
        led = db.query(Class).filter(
            Class.teacher_id == teacher_id, Class.academic_year == academic_year
        )
        if exclude_id:
            led = led.filter(Class.id != exclude_id)
        if led.first():
            raise HTTPException(
                status_code=409,
                detail="This teacher is already the class teacher of another class this year.",
            )


@router.post("/classes", response_model=ClassResponse, status_code=201)
def create_class(class_in: ClassCreate, db: Session = Depends(get_db)):
    grade = db.query(Grade).filter(Grade.id == class_in.grade_id).first()
    if not grade:
        raise HTTPException(status_code=404, detail="Grade not found")
    teacher = None
    if class_in.teacher_id:
        teacher = db.query(Teacher).filter(Teacher.id == class_in.teacher_id).first()
        if not teacher:
            raise HTTPException(status_code=404, detail="Teacher not found")

    academic_year = class_in.academic_year or date.today().year
    _check_class_unique(db, class_in.name, grade.id, academic_year, class_in.teacher_id)

    cls = Class(
        name=class_in.name,
        grade_id=grade.id,
        teacher_id=class_in.teacher_id,
        academic_year=academic_year,
    )
    db.add(cls)
    teacher_name = _full_name(teacher) or "no"
    notify(
        db,
        "New Class Created",
        f"A new class {cls.name} has been created for {grade.name} with {teacher_name} as the class teacher.",
        "class",
    )
    db.commit()
    db.refresh(cls)
    return cls


@router.get("/classes/{class_id}", response_model=ClassDetailResponse)
def get_class(class_id: UUID, db: Session = Depends(get_db)):
    cls = _get_class(db, class_id)
    return ClassDetailResponse(
        **ClassResponse.model_validate(cls).model_dump(),
        grade_name=cls.grade.name if cls.grade else None,
        teacher_name=_full_name(cls.teacher),
        students=[
            ClassStudentItem(id=s.id, student_id=s.student_id, name=_full_name(s))
            for s in sorted(cls.students, key=lambda s: (s.last_name, s.first_name))
        ],
        subjects=[
            ClassSubjectItem(
                id=cs.id,
                subject_id=cs.subject_id,
                subject_name=cs.subject.name,
                teacher_id=cs.teacher_id,
                teacher_name=_full_name(cs.teacher),
            )
            for cs in sorted(cls.class_subjects, key=lambda cs: cs.subject.name)
        ],
        representatives=[
            RepresentativeItem(
                role=r.role, student_id=r.student_id, student_name=_full_name(r.student)
            )
            for r in cls.representatives
        ],
    )


@router.patch("/classes/{class_id}", response_model=ClassResponse)
def update_class(class_id: UUID, class_in: ClassUpdate, db: Session = Depends(get_db)):
    cls = _get_class(db, class_id)
    update_data = class_in.model_dump(exclude_unset=True)
    _check_class_unique(
        db,
        update_data.get("name", cls.name),
        update_data.get("grade_id", cls.grade_id),
        update_data.get("academic_year", cls.academic_year),
        update_data.get("teacher_id", cls.teacher_id),
        exclude_id=cls.id,
    )
    for field, value in update_data.items():
        setattr(cls, field, value)
    db.commit()
    db.refresh(cls)
    return cls


@router.delete("/classes/{class_id}")
def delete_class(class_id: UUID, db: Session = Depends(get_db)):
    cls = _get_class(db, class_id)
    for student in cls.students:
        student.class_id = None
    db.query(Timetable).filter(Timetable.class_id == cls.id).delete()
    db.query(Mark).filter(Mark.class_id == cls.id).update({"class_id": None})
    db.query(Achievement).filter(Achievement.class_id == cls.id).update({"class_id": None})
    db.delete(cls)
    db.commit()
    return {"message": "Class deleted successfully"}


@router.post("/classes/{class_id}/students")
def add_student_to_class(
    class_id: UUID, data: AddStudentToClass, db: Session = Depends(get_db)
):
    cls = _get_class(db, class_id)
    student = db.query(Student).filter(Student.id == data.student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    student.class_id = cls.id
    db.flush()
    result = try_assign_subjects(db, student.id, cls.id, cls.academic_year)
    db.commit()
    return {
        "message": "Student added to class successfully.",
        "subject_assignment": result.model_dump(),
    }


# Class Subjects (Mapping)
@router.put("/classes/{class_id}/subjects", response_model=List[ClassSubjectItem])
def set_class_subjects(
    class_id: UUID, data: ClassSubjectsUpdate, db: Session = Depends(get_db)
):
    cls = _get_class(db, class_id)
    selected = set(data.subject_ids)
    found = {s.id for s in db.query(Subject).filter(Subject.id.in_(selected)).all()} if selected else set()
    unknown = selected - found
    if unknown:
        raise HTTPException(status_code=404, detail="Subject not found")

    current = {cs.subject_id: cs for cs in cls.class_subjects}
    for subject_id in selected - current.keys():
        db.add(ClassSubject(class_id=cls.id, subject_id=subject_id))
    for subject_id in current.keys() - selected:
        db.delete(current[subject_id])
    db.commit()
    db.refresh(cls)
    return [
        ClassSubjectItem(
            id=cs.id,
            subject_id=cs.subject_id,
            subject_name=cs.subject.name,
            teacher_id=cs.teacher_id,
            teacher_name=_full_name(cs.teacher),
        )
        for cs in sorted(cls.class_subjects, key=lambda cs: cs.subject.name)
    ]


@router.put("/classes/{class_id}/subjects/{subject_id}/teacher", response_model=ClassSubjectItem)
def assign_subject_teacher(
    class_id: UUID,
    subject_id: UUID,
    data: SubjectTeacherAssign,
    db: Session = Depends(get_db),
):
    cls = _get_class(db, class_id)
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    teacher = db.query(Teacher).filter(Teacher.id == data.teacher_id).first()
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")
    teaches = (
        db.query(TeacherSubject)
        .filter(TeacherSubject.teacher_id == teacher.id, TeacherSubject.subject_id == subject.id)
        .first()
    )
    if not teaches:
        raise HTTPException(status_code=400, detail="Teacher does not teach this subject")

    mapping = (
        db.query(ClassSubject)
        .filter(ClassSubject.class_id == cls.id, ClassSubject.subject_id == subject.id)
        .first()
    )
    if mapping:
        mapping.teacher_id = teacher.id
    else:
        mapping = ClassSubject(class_id=cls.id, subject_id=subject.id, teacher_id=teacher.id)
        db.add(mapping)
    db.commit()
    db.refresh(mapping)
    return ClassSubjectItem(
        id=mapping.id,
        subject_id=subject.id,
        subject_name=subject.name,
        teacher_id=teacher.id,
        teacher_name=_full_name(teacher),
    )


@router.put("/classes/{class_id}/representatives", response_model=RepresentativeItem)
def assign_representative(
    class_id: UUID, data: RepresentativeAssign, db: Session = Depends(get_db)
):
    cls = _get_class(db, class_id)
    student = db.query(Student).filter(Student.id == data.student_id).first()
    if not student or student.class_id != cls.id:
        raise HTTPException(status_code=400, detail="Student is not in this class")

    rep = (
        db.query(ClassRepresentative)
        .filter(ClassRepresentative.class_id == cls.id, ClassRepresentative.role == data.role)
        .first()
    )
    if rep:
        rep.student_id = student.id
    else:
        rep = ClassRepresentative(class_id=cls.id, student_id=student.id, role=data.role)
        db.add(rep)

    role_name = data.role.replace("_", " ").title()
    notify(
        db,
        "Class Representative Assigned",
        f"{_full_name(student)} has been assigned as {role_name} for {cls.display_name}.",
        "class",
    )
    db.commit()
    return RepresentativeItem(role=rep.role, student_id=student.id, student_name=_full_name(student))


# --- Subjects ---


@router.get("/subjects", response_model=List[SubjectResponse])
def get_subjects(db: Session = Depends(get_db)):
    return db.query(Subject).order_by(Subject.name).all()


def _check_subject_unique(db: Session, name: Optional[str], code: Optional[str], exclude_id=None):
    if name:
        query = db.query(Subject).filter(Subject.name == name)
        if exclude_id:
            query = query.filter(Subject.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=409, detail="A subject with this name already exists.")
    if code:
        query = db.query(Subject).filter(Subject.code == code)
        if exclude_id:
            query = query.filter(Subject.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=409, detail="A subject with this code already exists.")


@router.post("/subjects", response_model=SubjectResponse, status_code=201)
def create_subject(subject_in: SubjectCreate, db: Session = Depends(get_db)):
    _check_subject_unique(db, subject_in.name, subject_in.code)
    sub = Subject(**subject_in.model_dump())
    db.add(sub)
    notify(
        db,
        "New Subject Added",
        f'A new subject "{sub.name}" has been added to the curriculum.',
        "subject",
    )
    db.commit()
    db.refresh(sub)
    return sub


@router.get("/subjects/{subject_id}", response_model=SubjectResponse)
def get_subject(subject_id: UUID, db: Session = Depends(get_db)):
    sub = db.query(Subject).filter(Subject.id == subject_id).first()
    if not sub:
        raise HTTPException(status_code=404, detail="Subject not found")
    return sub


@router.patch("/subjects/{subject_id}", response_model=SubjectResponse)
def update_subject(subject_id: UUID, subject_in: SubjectUpdate, db: Session = Depends(get_db)):
    sub = get_subject(subject_id, db)
    update_data = subject_in.model_dump(exclude_unset=True)
    _check_subject_unique(db, update_data.get("name"), update_data.get("code"), exclude_id=sub.id)
    for field, value in update_data.items():
        setattr(sub, field, value)
    db.commit()
    db.refresh(sub)
    return sub


@router.delete("/subjects/{subject_id}")
def delete_subject(subject_id: UUID, db: Session = Depends(get_db)):
    sub = get_subject(subject_id, db)
    in_use = (
        db.query(ClassSubject).filter(ClassSubject.subject_id == sub.id).first()
        or db.query(StudentSubject).filter(StudentSubject.subject_id == sub.id).first()
        or db.query(Mark).filter(Mark.subject_id == sub.id).first()
    )
    if in_use:
        raise HTTPException(status_code=409, detail="Subject is assigned to a class or student")
    db.query(TeacherSubject).filter(TeacherSubject.subject_id == sub.id).delete()
    db.delete(sub)
    db.commit()
    return {"message": "Subject deleted successfully"}
