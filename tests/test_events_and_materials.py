from datetime import timedelta

from app.core import security
from app.models import LearningMaterial, UserRole

EVENTS_URL = "/api/v1/events"
MATERIALS_URL = "/api/v1/learning-materials"


def event_payload(**overrides):
    payload = {
        "title": "Sports Day",
        "description": "Inter-house athletics",
        "start_date": "2025-03-01T08:00:00",
        "end_date": "2025-03-01T15:00:00",
        "event_type": "sports",
    }
    payload.update(overrides)
    return payload


def test_private_events_are_hidden_from_public(client, admin_headers):
    client.post(f"{EVENTS_URL}/", json=event_payload(), headers=admin_headers)
    client.post(f"{EVENTS_URL}/", json=event_payload(title="Staff Meeting", is_public=False), headers=admin_headers)

    public = client.get(f"{EVENTS_URL}/").json()
    everything = client.get(f"{EVENTS_URL}/", headers=admin_headers).json()

    assert [e["title"] for e in public] == ["Sports Day"]
    assert sorted(e["title"] for e in everything) == ["Sports Day", "Staff Meeting"]


def test_stale_token_browses_public_events(client, admin, admin_headers):
    client.post(f"{EVENTS_URL}/", json=event_payload(), headers=admin_headers)
    client.post(f"{EVENTS_URL}/", json=event_payload(title="Staff Meeting", is_public=False), headers=admin_headers)
    expired = security.create_access_token(admin.id, expires_delta=timedelta(minutes=-5))

    for token in (expired, "not-a-jwt"):
        response = client.get(f"{EVENTS_URL}/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert [e["title"] for e in response.json()] == ["Sports Day"]


def test_event_cannot_end_before_it_starts(client, admin_headers):
    response = client.post(
        f"{EVENTS_URL}/",
        json=event_payload(end_date="2025-02-28T08:00:00"),
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_teacher_uploads_and_deletes_material(client, db, make_user, headers_for, make_subjects, make_class):
    subjects = make_subjects("Life Sciences")
    cls = make_class("Grade 11", "C")
    teacher = make_user(UserRole.teacher)
    headers = headers_for(teacher)

    response = client.post(
        f"{MATERIALS_URL}/",
        data={
            "title": "Cell structure",
            "material_type": "notes",
            "subject_id": str(subjects["Life Sciences"].id),
            "grade_id": str(cls.grade_id),
        },
        files={"file": ("cells.pdf", b"%PDF-1.4 test", "application/pdf")},
        headers=headers,
    )

    assert response.status_code == 201, response.text
    material = response.json()
    assert material["file_url"].startswith("/uploads/materials/")
    assert material["file_url"].endswith(".pdf")

    other_teacher = make_user(UserRole.teacher)
    denied = client.delete(f"{MATERIALS_URL}/{material['id']}", headers=headers_for(other_teacher))
    assert denied.status_code == 403

    assert client.delete(f"{MATERIALS_URL}/{material['id']}", headers=headers).status_code == 200
    assert db.query(LearningMaterial).count() == 0


def test_upload_rejects_unknown_file_types(client, make_user, headers_for, make_subjects, make_class):
    subjects = make_subjects("History")
    cls = make_class("Grade 9", "A")
    teacher = make_user(UserRole.teacher)

    response = client.post(
        f"{MATERIALS_URL}/",
        data={
            "title": "Script",
            "subject_id": str(subjects["History"].id),
            "grade_id": str(cls.grade_id),
        },
        files={"file": ("run.exe", b"MZ", "application/octet-stream")},
        headers=headers_for(teacher),
    )

    assert response.status_code == 400


def test_students_cannot_upload(client, make_user, headers_for, make_subjects, make_class):
    subjects = make_subjects("History")
    cls = make_class("Grade 9", "B")
    student = make_user(UserRole.student)
    response = client.post(
        f"{MATERIALS_URL}/",
        data={"title": "x", "subject_id": str(subjects["History"].id), "grade_id": str(cls.grade_id)},
        files={"file": ("x.pdf", b"x", "application/pdf")},
        headers=headers_for(student),
    )
    assert response.status_code == 403
