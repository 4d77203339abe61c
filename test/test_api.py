from conftest import signup_headers


def test_signup_and_login_shape(client_factory):
    client = client_factory()

    r = client.post("/api/auth/signup", json={"email": "ann@example.com", "password": "pw"})
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["email"] == "ann@example.com"
    assert isinstance(body["user"]["id"], int)

    r = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "pw"})
    assert r.status_code == 200
    assert r.json()["user"] == body["user"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {r.json()['token']}"})
    assert me.json() == body["user"]


def test_duplicate_signup_is_409(client_factory):
    client = client_factory()
    signup_headers(client)
    r = client.post("/api/auth/signup", json={"email": "ann@example.com", "password": "x"})
    assert r.status_code == 409
    assert r.json() == {"error": "Email already registered"}


def test_bad_login_is_401(client_factory):
    client = client_factory()
    signup_headers(client)
    r = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}


def test_task_routes_require_token(client_factory):
    client = client_factory()
    assert client.get("/api/tasks").status_code == 401
    assert client.get("/api/tasks", headers={"Authorization": "Bearer junk"}).status_code == 401
    assert client.post("/api/tasks", json={"title": "x"}).status_code == 401


def test_create_and_list_tasks(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(category="Study", priority="High"))
    headers = signup_headers(client)

    r = client.post(
        "/api/tasks",
        json={"title": "Read chapter 4", "description": "bio", "due_date": "2024-03-01T00:00:00Z"},
        headers=headers,
    )
    assert r.status_code == 200
    created = r.json()
    assert created["category"] == "Study"
    assert created["priority"] == "High"
    assert created["completed"] is False

    client.post("/api/tasks", json={"title": "Undated"}, headers=headers)
    client.post("/api/tasks", json={"title": "Early", "due_date": "2024-01-01T00:00:00Z"}, headers=headers)

    titles = [t["title"] for t in client.get("/api/tasks", headers=headers).json()]
    assert titles == ["Early", "Read chapter 4", "Undated"]


def test_create_defaults_when_ai_is_down(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(category=RuntimeError("down"), priority=None))
    headers = signup_headers(client)
    r = client.post("/api/tasks", json={"title": "Call plumber", "description": None}, headers=headers)
    assert r.status_code == 200
    assert (r.json()["category"], r.json()["priority"]) == ("Other", "Medium")
    assert r.json()["description"] == ""


def test_blank_title_is_rejected(client_factory):
    client = client_factory()
    headers = signup_headers(client)
    assert client.post("/api/tasks", json={"title": "   "}, headers=headers).status_code == 422


def test_update_and_delete(client_factory):
    client = client_factory()
    headers = signup_headers(client)
    task_id = client.post("/api/tasks", json={"title": "Draft"}, headers=headers).json()["id"]

    r = client.put(
        f"/api/tasks/{task_id}",
        json={"completed": True, "priority": "Low", "unknown_field": 1},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["completed"] is True
    assert r.json()["priority"] == "Low"

    r = client.delete(f"/api/tasks/{task_id}", headers=headers)
    assert r.json() == {"success": True}
    assert client.get("/api/tasks", headers=headers).json() == []


def test_other_accounts_tasks_are_not_found(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(estimate="2", procedure="1. x"))
    owner = signup_headers(client, "ann@example.com")
    intruder = signup_headers(client, "bob@example.com")
    task_id = client.post("/api/tasks", json={"title": "Secret plan"}, headers=owner).json()["id"]

    responses = [
        client.put(f"/api/tasks/{task_id}", json={"title": "mine"}, headers=intruder),
        client.delete(f"/api/tasks/{task_id}", headers=intruder),
        client.post(f"/api/tasks/{task_id}/predict-time", headers=intruder),
        client.post(f"/api/tasks/{task_id}/generate-procedure", headers=intruder),
    ]
    for r in responses:
        assert r.status_code == 404
        assert "Secret plan" not in r.text

    assert client.get("/api/tasks", headers=intruder).json() == []
    assert client.get("/api/tasks", headers=owner).json()[0]["title"] == "Secret plan"


def test_predict_time(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(estimate="3.5 hours"))
    headers = signup_headers(client)
    task_id = client.post("/api/tasks", json={"title": "Paint"}, headers=headers).json()["id"]

    r = client.post(f"/api/tasks/{task_id}/predict-time", headers=headers)
    assert r.json() == {"estimate": 3.5}
    assert client.get("/api/tasks", headers=headers).json()[0]["estimated_time_hours"] == 3.5


def test_predict_time_unknown_is_null(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(estimate="unknown"))
    headers = signup_headers(client)
    task_id = client.post("/api/tasks", json={"title": "Paint"}, headers=headers).json()["id"]

    r = client.post(f"/api/tasks/{task_id}/predict-time", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"estimate": None}
    assert client.get("/api/tasks", headers=headers).json()[0]["estimated_time_hours"] is None


def test_generate_procedure(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(procedure="1. Sand\n2. Paint"))
    headers = signup_headers(client)
    task_id = client.post("/api/tasks", json={"title": "Paint"}, headers=headers).json()["id"]

    r = client.post(f"/api/tasks/{task_id}/generate-procedure", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"procedure": "1. Sand\n2. Paint"}


def test_generate_procedure_failure_is_500(client_factory, fake_provider_factory):
    client = client_factory(fake_provider_factory(procedure=TimeoutError("slow")))
    headers = signup_headers(client)
    task_id = client.post("/api/tasks", json={"title": "Paint"}, headers=headers).json()["id"]

    r = client.post(f"/api/tasks/{task_id}/generate-procedure", headers=headers)
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate procedure from AI."}


def test_category_stats(client_factory, fake_provider_factory):
    answers = iter(["Work", "Work", "Errand"])
    client = client_factory(fake_provider_factory(category=lambda: next(answers)))
    headers = signup_headers(client)
    for title in ("a", "b", "c"):
        client.post("/api/tasks", json={"title": title}, headers=headers)

    r = client.get("/api/tasks/stats/categories", headers=headers)
    assert r.json() == [{"category": "Work", "count": 2}, {"category": "Errand", "count": 1}]


def test_null_for_required_fields_is_422(client_factory):
    client = client_factory()
    headers = signup_headers(client)
    task_id = client.post("/api/tasks", json={"title": "Stay put"}, headers=headers).json()["id"]

    for body in ({"title": None}, {"user_id": None}, {"completed": None, "priority": "Low"}):
        r = client.put(f"/api/tasks/{task_id}", json=body, headers=headers)
        assert r.status_code == 422

    listed = client.get("/api/tasks", headers=headers).json()
    assert len(listed) == 1
    assert listed[0]["title"] == "Stay put"
    assert listed[0]["completed"] is False
    assert listed[0]["priority"] == "Medium"


def test_due_date_can_be_cleared(client_factory):
    client = client_factory()
    headers = signup_headers(client)
    task_id = client.post(
        "/api/tasks", json={"title": "Maybe later", "due_date": "2024-05-01T00:00:00Z"}, headers=headers
    ).json()["id"]

    r = client.put(f"/api/tasks/{task_id}", json={"due_date": None}, headers=headers)
    assert r.status_code == 200
    assert r.json()["due_date"] is None
