from ..conftest import TEST_PASSWORD, at, lesson_payload

BASE = "/api/v1/students"
NOA_ID = "0501234567"
DAN = {"id": "s-2", "name": "Dan", "preferences": ["CHEST"]}


def _register(client, **overrides) -> dict:
    body = {
        "id": NOA_ID,
        "name": "Noa",
        "preferences": ["CHEST"],
        "password": TEST_PASSWORD,
    }
    body.update(overrides)
    response = client.post(BASE, json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _lesson(client, instructor_id, start, **kwargs) -> dict:
    response = client.post("/api/v1/lessons", json=lesson_payload(instructor_id, start, **kwargs))
    assert response.status_code == 201, response.text
    return response.json()


class TestStudentAccountRoutes:
    def test_register(self, client):
        data = _register(client, type_preference={"preference": "PRIVATE", "priority1": "MIXED"})

        assert data["id"] == NOA_ID
        assert data["type_preference"] == {
            "preference": "PRIVATE",
            "priority1": "MIXED",
            "priority2": None,
        }
        assert "password" not in data

    def test_register_duplicate(self, client):
        _register(client)
        response = client.post(
            BASE,
            json={"id": NOA_ID, "name": "Other", "preferences": ["CHEST"], "password": TEST_PASSWORD},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "STUDENT_ALREADY_EXISTS"

    def test_register_requires_preferences(self, client):
        response = client.post(
            BASE, json={"id": NOA_ID, "name": "Noa", "preferences": [], "password": TEST_PASSWORD}
        )
        assert response.status_code == 422

    def test_login(self, client):
        _register(client)
        response = client.post(f"{BASE}/login", json={"id": NOA_ID, "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["name"] == "Noa"

        response = client.post(f"{BASE}/login", json={"id": NOA_ID, "password": "wrong-one"})
        assert response.status_code == 401

    def test_get_update_list(self, client):
        _register(client)

        response = client.put(
            f"{BASE}/{NOA_ID}", json={"name": "Noa Levi", "preferences": ["BACK_STROKE"]}
        )
        assert response.status_code == 200
        assert client.get(f"{BASE}/{NOA_ID}").json()["preferences"] == ["BACK_STROKE"]
        assert [student["id"] for student in client.get(BASE).json()] == [NOA_ID]

    def test_get_unknown(self, client):
        response = client.get(f"{BASE}/missing")
        assert response.status_code == 404
        assert response.json()["code"] == "STUDENT_NOT_FOUND"

    def test_delete_and_delete_all(self, client):
        _register(client)
        _register(client, id="0527654321", name="Dan")

        assert client.delete(f"{BASE}/{NOA_ID}").status_code == 200
        assert client.get(f"{BASE}/{NOA_ID}").status_code == 404
        assert client.delete(BASE).json()["deleted_count"] == 1


class TestStudentBookingRoutes:
    def test_join_and_leave(self, client, instructor, monday):
        _register(client)
        lesson = _lesson(client, instructor.id, at(monday, 10), students=[DAN])
        url = f"{BASE}/{NOA_ID}/lessons/{lesson['id']}"

        response = client.post(url)
        assert response.status_code == 200
        assert [student["id"] for student in response.json()["students"]] == ["s-2", NOA_ID]

        assert [item["id"] for item in client.get(f"{BASE}/{NOA_ID}/lessons").json()] == [
            lesson["id"]
        ]

        response = client.post(url)
        assert response.status_code == 409
        assert response.json()["code"] == "ALREADY_ATTENDING"

        response = client.delete(url)
        assert response.status_code == 200
        assert client.get(f"{BASE}/{NOA_ID}/lessons").json() == []

    def test_leaving_last_student_removes_lesson(self, client, instructor, monday):
        _register(client)
        lesson = _lesson(
            client,
            instructor.id,
            at(monday, 10),
            students=[{"id": NOA_ID, "name": "Noa", "preferences": ["CHEST"]}],
        )

        response = client.delete(f"{BASE}/{NOA_ID}/lessons/{lesson['id']}")

        assert response.status_code == 200
        assert "removed" in response.json()["message"]
        assert client.get(f"/api/v1/lessons/{lesson['id']}").status_code == 404

    def test_join_private_lesson(self, client, instructor, monday):
        _register(client)
        lesson = _lesson(client, instructor.id, at(monday, 10), type_lesson="PRIVATE", students=[DAN])

        response = client.post(f"{BASE}/{NOA_ID}/lessons/{lesson['id']}")

        assert response.status_code == 400
        assert response.json()["code"] == "LESSON_PRIVATE"

    def test_leave_not_attending(self, client, instructor, monday):
        _register(client)
        lesson = _lesson(client, instructor.id, at(monday, 10), students=[DAN])

        response = client.delete(f"{BASE}/{NOA_ID}/lessons/{lesson['id']}")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_ATTENDING"

    def test_available_lessons(self, client, instructor, monday):
        _register(client, type_preference={"preference": "MIXED"})
        public = _lesson(client, instructor.id, at(monday, 10), students=[DAN])
        mixed = _lesson(
            client,
            instructor.id,
            at(monday, 12),
            type_lesson="MIXED",
            students=[{"id": "s-3", "name": "Gal", "preferences": ["CHEST"]}],
        )

        response = client.get(f"{BASE}/{NOA_ID}/available-lessons")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [mixed["id"], public["id"]]
