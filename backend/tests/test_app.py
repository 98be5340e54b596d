import pytest
from fastapi.testclient import TestClient

from backend.app import app, get_config
from backend.core.repositories import ConfigService, InMemoryConfigRepository
from backend.tests.conftest import TREE_JSON

MERIT_JSON = [
    {"code": "MATMAT01a", "name": "Matematik 1a",
     "alternativeCourses": [{"code": "MATMAT01b", "name": "Matematik 1b"}]},
    {"code": "MATMAT02a", "name": "Matematik 2a", "alternativeCourses": []},
]
CATALOG_JSON = [{"code": "MATMAT02a", "name": "Matematik 2a", "points": 100}]


@pytest.fixture
def store():
    return InMemoryConfigRepository({"req": TREE_JSON, "merit": MERIT_JSON, "cat": CATALOG_JSON})


@pytest.fixture
def client(store):
    app.dependency_overrides[get_config] = lambda: ConfigService(store, "req", "merit", "cat")
    yield TestClient(app)
    app.dependency_overrides.clear()


def _doc(*subjects, personal_id="20050101-1234", degree=None):
    return {
        "fullName": "Anna Andersson",
        "personalId": personal_id,
        "hasValidDegree": degree,
        "subjects": [
            {"subjectName": n, "courseCode": c, "grade": g, "gymnasiumPoints": p} for n, c, g, p in subjects
        ],
    }


def test_check_requirements_merges_documents(client):
    body = {"documents": [
        _doc(("Matematik 1a", "MATMAT01a", "D", 100), degree="Gymnasieexamen"),
        _doc(("Matematik 1a", "MATMAT01a", "B", 100)),
    ]}
    r = client.post("/requirements/check", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["results"]["matematik 1a"]["is_met"] is True
    assert data["results"]["matematik 1a"]["student_grade"] == "B"
    assert data["results"]["matematik 2a"]["student_grade"] == "N/A"
    assert data["meets_all"] is False
    assert data["has_valid_degree"] is True
    # 17.5*100 + 0*100 (2a from catalog)
    assert data["average_merit_points"] == 8.75


def test_check_requirements_without_configuration(client, store):
    store.save("req", None)
    r = client.post("/requirements/check", json={"documents": [_doc()]})
    assert r.status_code == 400
    assert r.json()["detail"] == "Course equivalents not configured."


def test_documents_of_different_students(client):
    body = {"documents": [_doc(personal_id="1"), _doc(personal_id="2")]}
    assert client.post("/documents/merge", json=body).status_code == 400


def test_no_documents(client):
    assert client.post("/merit", json={"documents": []}).status_code == 400


def test_merit_endpoint(client):
    r = client.post("/merit", json={"documents": [_doc(("Matematik 1b", "MATMAT01b", "A", "100"))]})
    assert r.status_code == 200
    data = r.json()
    assert data["average"] == 10.0
    assert data["courses"]["Matematik 1b"]["merit_point"] == 20.0
    assert data["courses"]["Matematik 2a"]["student_grade"] == "N/A"


def test_config_round_trip(client, store):
    assert client.get("/config/requirements").json() == TREE_JSON
    assert client.put("/config/requirements", json={"subjects": []}).json() == {"success": True}
    assert store.load("req") == {"subjects": []}

    assert client.get("/config/merit-courses").json() == MERIT_JSON
    client.put("/config/merit-courses", json=[{"code": "X1", "name": "X", "gymnasiumPoints": 50}])
    assert store.load("merit") == [{"code": "X1", "name": "X", "alternativeCourses": [], "gymnasiumPoints": 50}]

    assert client.get("/catalog").json() == CATALOG_JSON
    assert client.get("/health").json() == {"status": "ok"}


def test_merged_document_can_be_checked(client):
    body = {"documents": [
        _doc(("Matematik 1a", "MATMAT01a", "D", 100)),
        _doc(("matematik 1a", "MATMAT01a", "A", "100"), ("Matematik 2a", "MATMAT02a", "E", 100)),
    ]}
    merged = client.post("/documents/merge", json=body)
    assert merged.status_code == 200
    assert merged.json()["documentName"] == "Merged Document"

    r = client.post("/requirements/check", json={"documents": [merged.json()]})
    assert r.status_code == 200
    data = r.json()
    assert data["document"]["id"] == merged.json()["id"]
    assert data["results"]["matematik 1a"]["student_grade"] == "A"
    assert data["meets_all"] is True


def test_confirm_document_clears_corrections(client):
    doc = _doc(("Svenska 1", "SVESVE01", "B", 100))
    doc["subjects"][0].update({
        "fuzzyMatchScore": 87.5,
        "originalSubjectName": "Svenska I",
        "originalCourseCode": "SVE01",
        "originalGymnasiumPoints": "50",
    })
    r = client.post("/documents/confirm", json=doc)
    assert r.status_code == 200
    subject = r.json()["subjects"][0]
    assert subject["subjectName"] == "Svenska 1"
    assert subject["fuzzyMatchScore"] == 100.0
    assert subject["originalSubjectName"] is None
    assert subject["originalCourseCode"] is None
    assert subject["originalGymnasiumPoints"] is None
