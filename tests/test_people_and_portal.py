from app.core import security
from app.models import Class, Notification, StudentSubject, TeacherSubject, User, UserRole

STUDENTS_URL = "/api/v1/admin/students"
TEACHERS_URL = "/api/v1/admin/teachers"
PORTAL_URL = "/api/v1/portal"


def test_create_student_with_parent_and_class(client, db, admin_headers, make_class, make_subjects):
    make_subjects("Home Language", "Mathematics", "Accounting")
    cls = make_class("Grade 10", "A", academic_year=2025)

    response = client.post(
        f"{STUDENTS_URL}/",
        json={
            "first_name": "Kagiso",
            "last_name": "Molefe",
            "email": "kagiso@example.com",
            "class_id": str(cls.id),
            "parent_name": "Grace Molefe",
            "parent_phone": "0831112222",
        },
        headers=admin_headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["student_id"].startswith("STU")
    assert body["class_name"] == "Grade 10 A"
    assert body["parents"][0]["first_name"] == "Grace"
    assert sorted(s["name"] for s in body["subjects"]) == ["Accounting", "Home Language", "Mathematics"]

    user = db.query(User).filter_by(email="kagiso@example.com").one()
    assert user.role == UserRole.student
    assert security.verify_password(f"{body['student_id']}@school", user.password_hash)


def test_duplicate_student_email_conflicts(client, make_user, admin_headers):
    make_user(UserRole.parent, email="taken@example.com")
    response = client.post(
        f"{STUDENTS_URL}/",
        json={"first_name": "A", "last_name": "B", "email": "taken@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_search_students(client, admin_headers, make_student):
    make_student(first_name="Ayanda", last_name="Khumalo")
    make_student(first_name="Bongani", last_name="Mahlangu")

    response = client.get(f"{STUDENTS_URL}/", params={"search": "khum"}, headers=admin_headers)

    assert [s["first_name"] for s in response.json()] == ["Ayanda"]


def test_remove_student_subject(client, db, admin_headers, make_student, make_subjects):
    subjects = make_subjects("History")
    student = make_student()
    db.add(StudentSubject(student_id=student.id, subject_id=subjects["History"].id, academic_year=2025))
    db.commit()
    url = f"{STUDENTS_URL}/{student.id}/subjects/{subjects['History'].id}"

    assert client.delete(url, params={"academic_year": 2025}, headers=admin_headers).status_code == 200
    assert client.delete(url, params={"academic_year": 2025}, headers=admin_headers).status_code == 404


def test_create_teacher_with_subjects_and_class(client, db, admin_headers, make_subjects):
    subjects = make_subjects("Mathematics", "Physical Sciences")
    grade = client.post("/api/v1/admin/grades", json={"name": "Grade 11"}, headers=admin_headers).json()

    response = client.post(
        f"{TEACHERS_URL}/",
        json={
            "first_name": "Pieter",
            "last_name": "Botha",
            "email": "pieter@school.test",
            "subject_ids": [str(s.id) for s in subjects.values()],
            "is_class_teacher": True,
            "class_grade_id": grade["id"],
            "class_name": "C",
        },
        headers=admin_headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert sorted(s["name"] for s in body["subjects"]) == ["Mathematics", "Physical Sciences"]
    assert [c["name"] for c in body["classes"]] == ["C"]

    user = db.query(User).filter_by(email="pieter@school.test").one()
    assert security.verify_password("botha123", user.password_hash)
    assert db.query(TeacherSubject).count() == 2
    assert db.query(Notification).filter_by(title="New Teacher Added").count() == 1


def test_deleting_teacher_frees_their_class(client, db, admin_headers, make_teacher, make_class):
    teacher = make_teacher()
    cls = make_class("Grade 9", "A", teacher_id=teacher.id)

    response = client.delete(f"{TEACHERS_URL}/{teacher.id}", headers=admin_headers)

    assert response.status_code == 200
    db.expire_all()
    assert db.get(Class, cls.id).teacher_id is None


def test_student_portal(client, db, make_user, headers_for, make_class, make_student, make_subjects, make_teacher):
    subjects = make_subjects("Geography")
    teacher = make_teacher(first_name="Nomsa", last_name="Sithole")
    cls = make_class("Grade 10", "C", academic_year=2025, teacher_id=teacher.id)
    user = make_user(UserRole.student)
    me = make_student(first_name="Lwazi", last_name="Mthembu", class_id=cls.id, user_id=user.id)
    make_student(first_name="Zola", last_name="Bhengu", class_id=cls.id)
    db.add(StudentSubject(student_id=me.id, subject_id=subjects["Geography"].id, academic_year=2025))
    db.commit()
    headers = headers_for(user)

    profile = client.get(f"{PORTAL_URL}/my-profile", headers=headers).json()
    assert profile["role"] == "student"
    assert profile["profile"]["student_id"] == me.student_id

    my_class = client.get(f"{PORTAL_URL}/my-class", headers=headers).json()
    assert my_class["name"] == "Grade 10 C"
    assert my_class["class_teacher"] == "Nomsa Sithole"
    assert [c["name"] for c in my_class["classmates"]] == ["Zola Bhengu"]

    my_subjects = client.get(f"{PORTAL_URL}/my-subjects", params={"academic_year": 2025}, headers=headers).json()
    assert [s["name"] for s in my_subjects["subjects"]] == ["Geography"]


def test_student_without_class(client, make_user, headers_for, make_student):
    user = make_user(UserRole.student)
    make_student(user_id=user.id)

    response = client.get(f"{PORTAL_URL}/my-class", headers=headers_for(user))

    assert response.status_code == 404


def test_teacher_portal_lists_classes(client, make_user, headers_for, make_teacher, make_class):
    user = make_user(UserRole.teacher)
    teacher = make_teacher(user_id=user.id)
    make_class("Grade 8", "B", teacher_id=teacher.id)

    body = client.get(f"{PORTAL_URL}/teacher/classes", headers=headers_for(user)).json()

    assert [c["name"] for c in body["class_teacher_of"]] == ["Grade 8 B"]
    assert body["teaching"] == []


def test_teacher_portal_needs_teacher_profile(client, make_user, headers_for):
    user = make_user(UserRole.teacher)
    assert client.get(f"{PORTAL_URL}/teacher/classes", headers=headers_for(user)).status_code == 404


def test_bulk_enroll_from_csv(client, db, admin_headers, make_user, make_class, make_subjects):
    make_subjects("Home Language", "History")
    cls = make_class("Grade 12", "D", academic_year=2025)
    make_user(UserRole.parent, email="taken@example.com")
    csv = (
        "first_name,last_name,email,grade,class,parent_name,parent_phone\n"
        "Anele,Cele,anele@example.com,Grade 12,D,Busi Cele,0820000001\n"
        "Bheki,Cele,taken@example.com,,,,\n"
        "Carla,Smit,carla@example.com,Grade 12,Z,,\n"
        ",Dube,dube@example.com,,,,\n"
        "Dineo,Moloi,dineo@example.com,,,,\n"
    )

    response = client.post(
        f"{STUDENTS_URL}/bulk-enroll",
        data={"academic_year": "2025"},
        files={"file": ("learners.csv", csv.encode(), "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["created"] == 2
    assert sorted(e["line"] for e in body["errors"]) == [3, 4, 5]

    anele = db.query(User).filter_by(email="anele@example.com").one()
    assert anele.role == UserRole.student
    placed = client.get(f"{STUDENTS_URL}/", params={"class_id": str(cls.id)}, headers=admin_headers).json()
    assert [s["first_name"] for s in placed] == ["Anele"]
    assert db.query(StudentSubject).count() == 2


def test_bulk_enroll_needs_required_columns(client, admin_headers):
    response = client.post(
        f"{STUDENTS_URL}/bulk-enroll",
        files={"file": ("learners.csv", b"name,email\nA,a@example.com\n", "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "first_name" in response.json()["detail"]


def test_moving_student_by_update_assigns_subjects(client, db, admin_headers, make_class, make_subjects, make_student):
    make_subjects("Home Language", "Mathematics", "Accounting")
    cls = make_class("Grade 10", "A", academic_year=2025)
    student = make_student()

    response = client.patch(
        f"{STUDENTS_URL}/{student.id}", json={"class_id": str(cls.id)}, headers=admin_headers
    )

    assert response.status_code == 200, response.text
    assert response.json()["class_id"] == str(cls.id)
    assigned = db.query(StudentSubject).filter_by(student_id=student.id, academic_year=2025).all()
    assert sorted(s.subject.name for s in assigned) == ["Accounting", "Home Language", "Mathematics"]

    # Saving the same class again does not duplicate anything
    client.patch(f"{STUDENTS_URL}/{student.id}", json={"class_id": str(cls.id), "phone": "0820000000"},
                 headers=admin_headers)
    assert db.query(StudentSubject).filter_by(student_id=student.id).count() == 3


def test_bulk_enroll_line_numbers_count_blank_lines(client, db, admin_headers):
    csv = (
        "first_name,last_name,email,grade,class\n"
        "Anele,Cele,anele@example.com,,\n"
        "\n"
        ",Dube,dube@example.com,,\n"
        "Dineo,Moloi,dineo@example.com,,\n"
    )

    response = client.post(
        f"{STUDENTS_URL}/bulk-enroll",
        files={"file": ("learners.csv", csv.encode(), "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["created"] == 2
    assert [e["line"] for e in body["errors"]] == [4]
    # Unplaced rows stay unplaced
    assert db.query(User).filter_by(email="dineo@example.com").one().role == UserRole.student
    assert db.query(StudentSubject).count() == 0
