from app.models import Notification, StudentSubject, TeacherSubject, UserRole

ADMIN_URL = "/api/v1/admin"

FET_SUBJECTS = (
    "Home Language",
    "First Additional Language",
    "Life Orientation",
    "Mathematics",
    "Physical Sciences",
    "Life Sciences",
    "Geography",
)


def create_grade(client, headers, name="Grade 10", level=10):
    response = client.post(f"{ADMIN_URL}/grades", json={"name": name, "level": level}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_admin_routes_reject_other_roles(client, make_user, headers_for):
    teacher = make_user(UserRole.teacher)
    response = client.get(f"{ADMIN_URL}/grades", headers=headers_for(teacher))
    assert response.status_code == 403


def test_duplicate_grade_conflicts(client, admin_headers):
    create_grade(client, admin_headers)
    response = client.post(f"{ADMIN_URL}/grades", json={"name": "Grade 10"}, headers=admin_headers)
    assert response.status_code == 409


def test_create_class_and_reject_duplicates(client, db, admin_headers, make_teacher):
    grade = create_grade(client, admin_headers)
    teacher = make_teacher()
    payload = {"name": "A", "grade_id": grade["id"], "teacher_id": str(teacher.id), "academic_year": 2025}

    created = client.post(f"{ADMIN_URL}/classes", json=payload, headers=admin_headers)
    assert created.status_code == 201, created.text
    assert created.json()["academic_year"] == 2025
    assert db.query(Notification).filter_by(title="New Class Created").count() == 1

    duplicate = client.post(f"{ADMIN_URL}/classes", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409
    assert "already exists" in duplicate.json()["detail"]

    second_class = dict(payload, name="B")
    busy_teacher = client.post(f"{ADMIN_URL}/classes", json=second_class, headers=admin_headers)
    assert busy_teacher.status_code == 409
    assert "class teacher" in busy_teacher.json()["detail"]

    next_year = dict(payload, academic_year=2026)
    assert client.post(f"{ADMIN_URL}/classes", json=next_year, headers=admin_headers).status_code == 201


def test_create_class_with_unknown_grade(client, admin_headers):
    response = client.post(
        f"{ADMIN_URL}/classes",
        json={"name": "A", "grade_id": "0b6f0e0c-7a55-4d0e-a1a9-5cbb1d0b9f10"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_adding_student_to_stream_class_assigns_subjects(
    client, db, admin_headers, make_class, make_subjects, make_student
):
    make_subjects(*FET_SUBJECTS)
    cls = make_class("Grade 10", "C", academic_year=2025)
    student = make_student()

    response = client.post(
        f"{ADMIN_URL}/classes/{cls.id}/students",
        json={"student_id": str(student.id)},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    result = response.json()["subject_assignment"]
    assert result["success"] is True
    assert sorted(result["assigned_subjects"]) == sorted(FET_SUBJECTS)
    assert db.query(StudentSubject).filter_by(student_id=student.id, academic_year=2025).count() == 7

    detail = client.get(f"{ADMIN_URL}/classes/{cls.id}", headers=admin_headers).json()
    assert [s["student_id"] for s in detail["students"]] == [student.student_id]
    assert detail["grade_name"] == "Grade 10"


def test_placement_stands_when_stream_is_unknown(
    client, db, admin_headers, make_class, make_student
):
    cls = make_class("Grade 11", "Science")
    student = make_student()

    response = client.post(
        f"{ADMIN_URL}/classes/{cls.id}/students",
        json={"student_id": str(student.id)},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["subject_assignment"]["success"] is False
    db.expire_all()
    db.refresh(student)
    assert student.class_id == cls.id


def test_subject_teacher_must_teach_subject(
    client, db, admin_headers, make_class, make_subjects, make_teacher
):
    subjects = make_subjects("Mathematics", "History")
    cls = make_class("Grade 9", "A")
    teacher = make_teacher()
    db.add(TeacherSubject(teacher_id=teacher.id, subject_id=subjects["Mathematics"].id))
    db.commit()

    wrong = client.put(
        f"{ADMIN_URL}/classes/{cls.id}/subjects/{subjects['History'].id}/teacher",
        json={"teacher_id": str(teacher.id)},
        headers=admin_headers,
    )
    assert wrong.status_code == 400

    right = client.put(
        f"{ADMIN_URL}/classes/{cls.id}/subjects/{subjects['Mathematics'].id}/teacher",
        json={"teacher_id": str(teacher.id)},
        headers=admin_headers,
    )
    assert right.status_code == 200
    assert right.json()["teacher_name"] == "Lerato Mokoena"


def test_class_subjects_are_replaced(client, admin_headers, make_class, make_subjects):
    subjects = make_subjects("Mathematics", "History", "Geography")
    cls = make_class("Grade 9", "B")
    url = f"{ADMIN_URL}/classes/{cls.id}/subjects"

    first = client.put(
        url,
        json={"subject_ids": [str(subjects["Mathematics"].id), str(subjects["History"].id)]},
        headers=admin_headers,
    )
    assert [s["subject_name"] for s in first.json()] == ["History", "Mathematics"]

    second = client.put(
        url,
        json={"subject_ids": [str(subjects["Geography"].id), str(subjects["History"].id)]},
        headers=admin_headers,
    )
    assert [s["subject_name"] for s in second.json()] == ["Geography", "History"]


def test_representative_must_belong_to_class(client, admin_headers, make_class, make_student):
    cls = make_class("Grade 9", "C")
    outsider = make_student(first_name="Outside")
    member = make_student(first_name="Inside", class_id=cls.id)
    url = f"{ADMIN_URL}/classes/{cls.id}/representatives"

    rejected = client.put(url, json={"student_id": str(outsider.id), "role": "class_captain"}, headers=admin_headers)
    assert rejected.status_code == 400

    accepted = client.put(url, json={"student_id": str(member.id), "role": "class_captain"}, headers=admin_headers)
    assert accepted.status_code == 200
    assert accepted.json()["student_name"] == "Inside Nkosi"


def test_subject_uniqueness_and_delete_guard(client, admin_headers, make_class):
    created = client.post(
        f"{ADMIN_URL}/subjects", json={"name": "Mathematics", "code": "MATH"}, headers=admin_headers
    )
    assert created.status_code == 201
    subject_id = created.json()["id"]

    same_name = client.post(f"{ADMIN_URL}/subjects", json={"name": "Mathematics"}, headers=admin_headers)
    assert same_name.status_code == 409
    same_code = client.post(
        f"{ADMIN_URL}/subjects", json={"name": "Maths", "code": "MATH"}, headers=admin_headers
    )
    assert same_code.status_code == 409

    cls = make_class("Grade 9", "D")
    client.put(f"{ADMIN_URL}/classes/{cls.id}/subjects", json={"subject_ids": [subject_id]}, headers=admin_headers)
    assert client.delete(f"{ADMIN_URL}/subjects/{subject_id}", headers=admin_headers).status_code == 409

    client.put(f"{ADMIN_URL}/classes/{cls.id}/subjects", json={"subject_ids": []}, headers=admin_headers)
    assert client.delete(f"{ADMIN_URL}/subjects/{subject_id}", headers=admin_headers).status_code == 200


def test_student_assign_subjects_endpoint(client, admin_headers, make_class, make_subjects, make_student):
    make_subjects(*FET_SUBJECTS)
    cls = make_class("Grade 12", "C", academic_year=2025)
    student = make_student(class_id=cls.id)
    url = f"/api/v1/admin/students/{student.id}/assign-subjects"

    first = client.post(url, params={"academic_year": 2025}, headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["message"] == "Successfully assigned 7 subjects to the student"

    second = client.post(url, params={"academic_year": 2025}, headers=admin_headers)
    assert second.json()["message"] == "Student already has all required subjects assigned"


def test_dashboard_overview_counts(client, admin_headers, make_student):
    make_student()
    response = client.get(f"{ADMIN_URL}/dashboard/overview", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["total_students"] == 1
    assert stats["pending_applications"] == 0
