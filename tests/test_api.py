import pytest
from fastapi.testclient import TestClient

from escola360.api import deps
from escola360.main import app
from escola360.services.library_store import InMemoryKeyValueStorage

PLAN_REQUEST = {
    "grade": "5º Ano do Ensino Fundamental",
    "subject": "Matemática",
    "bimester": "1º Bimestre",
    "curriculum": "BNCC (Padrão Nacional)",
    "customContext": "",
}


@pytest.fixture
def client(fake_generator):
    storage = InMemoryKeyValueStorage()
    deps.reset_sessions()
    app.dependency_overrides[deps.get_generator] = lambda: fake_generator
    app.dependency_overrides[deps.get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    deps.reset_sessions()


def _login(client, email="prof.ana@escola.com"):
    resp = client.post("/auth/login", json={"email": email, "password": "qualquer"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth(client):
    return _login(client)


def test_root(client):
    assert client.get("/").status_code == 200


def test_login_derives_name_from_email(client):
    resp = client.post("/auth/login", json={"email": "prof.ana@escola.com", "password": "x"})
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"] == {"email": "prof.ana@escola.com", "name": "prof.ana"}

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["name"] == "prof.ana"


def test_login_rejects_empty_credentials(client):
    assert client.post("/auth/login", json={"email": " ", "password": "x"}).status_code == 401


def test_planning_requires_token(client):
    assert client.get("/api/planning").status_code == 401
    assert client.get("/api/planning", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_catalog_lists_subjects_per_grade(client):
    catalog = client.get("/api/catalog").json()
    assert len(catalog["grades"]) == 12
    assert catalog["slideThemes"] == ["Indigo", "Emerald", "Violet", "Amber", "Rose"]

    subjects = client.get("/api/catalog/subjects", params={"grade": "1º Ano do Ensino Médio"}).json()
    assert "Física" in subjects["subjects"]
    assert "Ciências" not in subjects["subjects"]
    assert subjects["defaultQuestionQuantities"]["Múltipla Escolha"] == 5


def test_generate_plan_rejects_subject_outside_grade(client, auth):
    resp = client.post("/api/planning", json={**PLAN_REQUEST, "subject": "Física"}, headers=auth)
    assert resp.status_code == 422


def test_plan_generate_then_attach_slides(client, auth):
    resp = client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["planning"]["plans"]) == 3
    assert body["metadata"]["subject"] == "Matemática"

    resp = client.post("/api/planning/units/1/slides", headers=auth)
    assert resp.status_code == 200
    units = resp.json()["planning"]["plans"]
    assert len(units[1]["slideDeck"]["slides"]) == 6
    assert units[1]["slideDeck"]["theme"] == "Indigo"
    assert "slideDeck" not in units[0]


def test_unit_actions_without_plan_are_bad_requests(client, auth):
    assert client.post("/api/planning/units/0/text", headers=auth).status_code == 400


def test_unknown_unit_is_not_found(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    assert client.post("/api/planning/units/7/rubric", headers=auth).status_code == 404


def test_generation_failure_is_bad_gateway(client, auth, fake_generator):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    fake_generator.fail["text"] = True

    resp = client.post("/api/planning/units/0/text", headers=auth)

    assert resp.status_code == 502
    assert resp.json()["detail"] == {"action": "text", "index": 0, "message": "Erro ao gerar texto."}


def test_regenerate_writes_strategy(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    resp = client.post(
        "/api/planning/units/0/regenerate",
        json={"strategy": "Gamificação"},
        headers=auth,
    )
    unit = resp.json()["planning"]["plans"][0]
    assert unit["selectedStrategy"] == "Gamificação"
    assert unit["methodology"] == "Projeto em grupo"


def test_question_bank_uses_grade_defaults(client, auth, fake_generator):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    client.post("/api/planning/units/0/questions", json={}, headers=auth)
    resp = client.post("/api/planning/units/0/questions", json={}, headers=auth)

    assert len(resp.json()["planning"]["plans"][0]["questionBank"]) == 2
    _, _, quantities = fake_generator.calls[1]
    assert sum(quantities.values()) == 5


def test_assessment_generate_and_edit(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    resp = client.post(
        "/api/planning/units/2/assessment",
        json={"config": {"professorName": "Ana", "date": "01/04/2025"}},
        headers=auth,
    )
    assert resp.status_code == 200

    resp = client.patch(
        "/api/planning/units/2/assessment/questions/0",
        json={"optionIndex": 1, "optionValue": "B) 3"},
        headers=auth,
    )
    assessment = resp.json()["planning"]["plans"][2]["generatedAssessment"]
    assert assessment["questions"][0]["options"][1] == "B) 3"


def test_save_list_get_delete(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)

    resp = client.post("/api/planning/save", json={}, headers=auth)
    assert resp.status_code == 201
    item = resp.json()
    assert item["title"] == "Planejamento 5º Ano do Ensino Fundamental - Matemática - 1º Bimestre"
    assert item["metadata"]["bimester"] == "1º Bimestre"
    assert "createdAt" in item

    listed = client.get("/api/library", headers=auth).json()
    assert [i["id"] for i in listed] == [item["id"]]
    assert client.get(f"/api/library/{item['id']}", headers=auth).json()["title"] == item["title"]

    assert client.delete(f"/api/library/{item['id']}", headers=auth).status_code == 204
    assert client.delete(f"/api/library/{item['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/library/{item['id']}", headers=auth).status_code == 404
    assert client.get("/api/library", headers=auth).json() == []


def test_library_is_per_user(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    client.post("/api/planning/save", json={"title": "Meu"}, headers=auth)

    other = _login(client, "prof.bruno@escola.com")
    assert client.get("/api/library", headers=other).json() == []


def test_load_saved_plan_back_into_session(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    saved = client.post("/api/planning/save", json={"title": "Base"}, headers=auth).json()

    other = _login(client, "prof.bruno@escola.com")
    resp = client.put(
        "/api/planning",
        json={"planning": saved["content"], "metadata": saved["metadata"]},
        headers=other,
    )
    assert resp.status_code == 200
    assert client.get("/api/planning", headers=other).json()["planning"]["overview"] == "Visão geral do bimestre"


def test_assessment_edit_without_assessment_is_bad_request(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    resp = client.patch(
        "/api/planning/units/0/assessment/questions/0",
        json={"statement": "Novo enunciado"},
        headers=auth,
    )
    assert resp.status_code == 400


def test_assessment_edit_with_option_index_only_is_bad_request(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    client.post("/api/planning/units/0/assessment", json={}, headers=auth)
    resp = client.patch("/api/planning/units/0/assessment/questions/0", json={"optionIndex": 1}, headers=auth)
    assert resp.status_code == 400


def test_manual_unit_edit(client, auth):
    client.post("/api/planning", json=PLAN_REQUEST, headers=auth)
    resp = client.patch("/api/planning/units/1", json={"methodology": "Estudo dirigido"}, headers=auth)

    unit = resp.json()["planning"]["plans"][1]
    assert unit["methodology"] == "Estudo dirigido"
    assert unit["topic"] == "Decimais"
    assert client.patch("/api/planning/units/1", json={"nope": 1}, headers=auth).status_code == 422
    assert client.patch("/api/planning/units/9", json={"topic": "x"}, headers=auth).status_code == 404
