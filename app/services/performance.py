"""Term mark reports: a student's results and the principal's school,
teacher and top-student summaries."""

from collections import defaultdict
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.models import Class, Grade, Mark, Student, Subject, Teacher
from app.models.marks import PASS_MARK, mark_symbol
from app.schemas.marks import (
    GroupAverage,
    ResultsResponse,
    SchoolPerformance,
    SubjectResult,
    TeacherPerformance,
    TopStudent,
)


def _round(value) -> Optional[float]:
    return round(float(value), 2) if value is not None else None


def _mean(values) -> float:
    return round(sum(values) / len(values), 2)


def _filters(academic_year: int, term: Optional[int]):
    conditions = [Mark.academic_year == academic_year]
    if term:
        conditions.append(Mark.term == term)
    return conditions


def _pass_rate(passed, count) -> Optional[float]:
    return round(100.0 * (passed or 0) / count, 2) if count else None


def student_results(db: Session, student: Student, academic_year: int) -> ResultsResponse:
    marks = (
        db.query(Mark)
        .filter(Mark.student_id == student.id, Mark.academic_year == academic_year)
        .all()
    )

    by_subject = defaultdict(dict)
    names = {}
    for m in marks:
        by_subject[m.subject_id][m.term] = m.mark
        names[m.subject_id] = m.subject.name

    subjects = []
    for subject_id, terms in by_subject.items():
        average = _mean(list(terms.values()))
        subjects.append(
            SubjectResult(
                subject_id=subject_id,
                subject=names[subject_id],
                terms=dict(sorted(terms.items())),
                average=average,
                symbol=mark_symbol(average),
            )
        )
    subjects.sort(key=lambda s: s.subject)

    by_term = defaultdict(list)
    for m in marks:
        by_term[m.term].append(m.mark)

    overall = _mean([s.average for s in subjects]) if subjects else None
    return ResultsResponse(
        academic_year=academic_year,
        subjects=subjects,
        term_averages={term: _mean(values) for term, values in sorted(by_term.items())},
        overall_average=overall,
        overall_symbol=mark_symbol(overall) if overall is not None else None,
    )


def school_performance(db: Session, academic_year: int, term: Optional[int] = None) -> SchoolPerformance:
    conditions = _filters(academic_year, term)
    average, count, passed = (
        db.query(
            func.avg(Mark.mark),
            func.count(Mark.id),
            func.sum(case((Mark.mark >= PASS_MARK, 1), else_=0)),
        )
        .filter(*conditions)
        .one()
    )

    grade_rows = (
        db.query(Grade.name, func.avg(Mark.mark), func.count(Mark.id))
        .select_from(Mark)
        .outerjoin(Class, Mark.class_id == Class.id)
        .outerjoin(Grade, Class.grade_id == Grade.id)
        .filter(*conditions)
        .group_by(Grade.name)
        .all()
    )
    class_rows = (
        db.query(Grade.name, Class.name, func.avg(Mark.mark), func.count(Mark.id))
        .select_from(Mark)
        .join(Class, Mark.class_id == Class.id)
        .join(Grade, Class.grade_id == Grade.id)
        .filter(*conditions)
        .group_by(Class.id, Grade.name, Class.name)
        .all()
    )
    subject_rows = (
        db.query(Subject.name, func.avg(Mark.mark), func.count(Mark.id))
        .join(Mark, Mark.subject_id == Subject.id)
        .filter(*conditions)
        .group_by(Subject.name)
        .all()
    )

    return SchoolPerformance(
        academic_year=academic_year,
        term=term,
        overall_average=_round(average),
        pass_rate=_pass_rate(passed, count),
        mark_count=count,
        grade_averages=sorted(
            (GroupAverage(name=name or "Unknown", average=_round(avg), count=n) for name, avg, n in grade_rows),
            key=lambda g: g.name,
        ),
        class_averages=sorted(
            (
                GroupAverage(name=f"{grade} {name}", average=_round(avg), count=n)
                for grade, name, avg, n in class_rows
            ),
            key=lambda g: g.name,
        ),
        subject_averages=sorted(
            (GroupAverage(name=name, average=_round(avg), count=n) for name, avg, n in subject_rows),
            key=lambda g: (-g.average, g.name),
        ),
    )


def teacher_performance(
    db: Session, academic_year: int, term: Optional[int] = None
) -> List[TeacherPerformance]:
    """Average of the marks earned by students in the classes each teacher leads."""
    conditions = _filters(academic_year, term)
    report = []
    for teacher in db.query(Teacher).order_by(Teacher.last_name, Teacher.first_name).all():
        class_ids = [
            cls.id
            for cls in db.query(Class).filter(
                Class.teacher_id == teacher.id, Class.academic_year == academic_year
            )
        ]
        average, count, passed = None, 0, 0
        if class_ids:
            average, count, passed = (
                db.query(
                    func.avg(Mark.mark),
                    func.count(Mark.id),
                    func.sum(case((Mark.mark >= PASS_MARK, 1), else_=0)),
                )
                .filter(Mark.class_id.in_(class_ids), *conditions)
                .one()
            )
        report.append(
            TeacherPerformance(
                teacher_id=teacher.id,
                name=f"{teacher.first_name} {teacher.last_name}",
                subjects=sorted(link.subject.name for link in teacher.subject_links),
                class_count=len(class_ids),
                average=_round(average),
                pass_rate=_pass_rate(passed, count),
                mark_count=count,
            )
        )
    return report


def top_students(
    db: Session,
    academic_year: int,
    term: Optional[int] = None,
    grade_id: Optional[UUID] = None,
    limit: int = 20,
) -> List[TopStudent]:
    average = func.avg(Mark.mark)
    query = (
        db.query(Student, average, func.count(func.distinct(Mark.subject_id)))
        .join(Mark, Mark.student_id == Student.id)
        .filter(*_filters(academic_year, term))
    )
    if grade_id:
        query = query.join(Class, Mark.class_id == Class.id).filter(Class.grade_id == grade_id)
    rows = (
        query.group_by(Student.id)
        .order_by(average.desc(), Student.last_name, Student.first_name)
        .limit(limit)
        .all()
    )
    return [
        TopStudent(
            position=position,
            student_id=student.id,
            student_code=student.student_id,
            name=f"{student.first_name} {student.last_name}",
            class_name=student.class_.display_name if student.class_ else None,
            average=_round(avg),
            subject_count=subjects,
        )
        for position, (student, avg, subjects) in enumerate(rows, start=1)
    ]
