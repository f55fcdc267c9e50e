from app.models import Achievement, Notification, UserRole

ACHIEVEMENTS_URL = "/api/v1/achievements"
STUDENTS_URL = "/api/v1/admin/students"


def achievement_payload(student, **overrides):
    payload = {
        "student_id": str(student.id),
        "achievement_type": "academic",
        "title": "Maths Olympiad",
        "description": "Placed in the provincial Mathematics Olympiad final.",
        "achievement_date": "2025-05-20",
        "rank": 1,
    }
    payload.update(overrides)
    return payload


def test_admin_records_achievement(client, db, admin_headers, make_user, make_student, make_class):
    cls = make_class("Grade 11", "C")
    user = make_user(UserRole.student)
    student = make_student("Zanele", "Mabaso", class_id=cls.id, user_id=user.id)

    response = client.post(
        f"{ACHIEVEMENTS_URL}/",
        json=achievement_payload(student, class_id=str(cls.id)),
        headers=admin_headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["student_name"] == "Zanele Mabaso"
    assert body["class_name"] == "Grade 11 C"
    # Grade is taken from the class
    assert body["grade_id"] == str(cls.grade_id)
    assert body["grade_name"] == "Grade 11"
    notification = db.query(Notification).filter_by(title="Achievement Recorded").one()
    assert notification.user_id == user.id


def test_achievement_validation(client, admin_headers, make_student):
    student = make_student()

    short = achievement_payload(student, description="Too short")
    bad_type = achievement_payload(student, achievement_type="gaming")
    bad_rank = achievement_payload(student, rank=0)
    for payload in (short, bad_type, bad_rank):
        assert client.post(f"{ACHIEVEMENTS_URL}/", json=payload, headers=admin_headers).status_code == 422

    unknown = achievement_payload(student, student_id="0b6f0e0c-7a55-4d0e-a1a9-5cbb1d0b9f10")
    assert client.post(f"{ACHIEVEMENTS_URL}/", json=unknown, headers=admin_headers).status_code == 404


def test_list_filter_search_and_sort(client, admin_headers, make_user, headers_for, make_student, make_class):
    cls = make_class("Grade 9", "B")
    thabo = make_student("Thabo", "Nkosi", class_id=cls.id)
    lerato = make_student("Lerato", "Mokoena")
    for payload in (
        achievement_payload(thabo, title="Chess Champion", achievement_type="other", rank=2, class_id=str(cls.id)),
        achievement_payload(lerato, title="Netball Captain", achievement_type="sports", rank=1,
                            description="Led the first team to the regional netball title.",
                            achievement_date="2025-08-01"),
        achievement_payload(thabo, title="Top Reader", rank=3, achievement_date="2025-09-15"),
    ):
        assert client.post(f"{ACHIEVEMENTS_URL}/", json=payload, headers=admin_headers).status_code == 201

    viewer = headers_for(make_user(UserRole.student))
    by_rank = client.get(f"{ACHIEVEMENTS_URL}/", headers=viewer).json()
    by_date = client.get(f"{ACHIEVEMENTS_URL}/", params={"sort": "date"}, headers=viewer).json()
    sports = client.get(f"{ACHIEVEMENTS_URL}/", params={"achievement_type": "sports"}, headers=viewer).json()
    named = client.get(f"{ACHIEVEMENTS_URL}/", params={"search": "nkosi"}, headers=viewer).json()
    grade9 = client.get(f"{ACHIEVEMENTS_URL}/", params={"grade_id": str(cls.grade_id)}, headers=viewer).json()

    assert [a["title"] for a in by_rank] == ["Netball Captain", "Chess Champion", "Top Reader"]
    assert [a["title"] for a in by_date] == ["Top Reader", "Netball Captain", "Chess Champion"]
    assert [a["title"] for a in sports] == ["Netball Captain"]
    assert sorted(a["title"] for a in named) == ["Chess Champion", "Top Reader"]
    assert [a["title"] for a in grade9] == ["Chess Champion"]
    assert client.get(f"{ACHIEVEMENTS_URL}/", params={"sort": "score"}, headers=viewer).status_code == 400


def test_update_and_delete_achievement(client, db, admin_headers, make_student):
    student = make_student()
    created = client.post(f"{ACHIEVEMENTS_URL}/", json=achievement_payload(student), headers=admin_headers).json()
    url = f"{ACHIEVEMENTS_URL}/{created['id']}"

    updated = client.put(url, json=achievement_payload(student, rank=2, title="Maths Olympiad Finalist"),
                         headers=admin_headers)

    assert updated.status_code == 200
    assert (updated.json()["rank"], updated.json()["title"]) == (2, "Maths Olympiad Finalist")
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 404
    db.expire_all()
    assert db.query(Achievement).count() == 0


def test_only_admins_write_achievements(client, make_user, headers_for, make_student):
    student = make_student()
    teacher = make_user(UserRole.teacher)

    response = client.post(
        f"{ACHIEVEMENTS_URL}/", json=achievement_payload(student), headers=headers_for(teacher)
    )

    assert response.status_code == 403
    assert client.get(f"{ACHIEVEMENTS_URL}/").status_code == 401


def test_deleting_student_removes_their_achievements(client, db, admin_headers, make_student):
    student = make_student()
    client.post(f"{ACHIEVEMENTS_URL}/", json=achievement_payload(student), headers=admin_headers)

    assert client.delete(f"{STUDENTS_URL}/{student.id}", headers=admin_headers).status_code == 200

    db.expire_all()
    assert db.query(Achievement).count() == 0
