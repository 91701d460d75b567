import re

from medicare.services.qr_service import qr_service


def test_register_worker_issues_identifier(client, register_worker):
    first = register_worker()
    second = register_worker(full_name="Wei Chen", age=41, gender="male")

    assert re.fullmatch(r"WKR-\d{6}", first["worker_id"])
    assert first["worker_id"] != second["worker_id"]
    assert first["full_name"] == "Maria Santos"
    assert first["created_by"] is not None


def test_register_worker_validates_fields(client, admin_headers):
    too_young = client.post(
        "/api/workers",
        json={"full_name": "Kid", "age": 12, "gender": "male"},
        headers=admin_headers,
    )
    assert too_young.status_code == 422

    bad_gender = client.post(
        "/api/workers",
        json={"full_name": "Someone", "age": 30, "gender": "unknown"},
        headers=admin_headers,
    )
    assert bad_gender.status_code == 422


def test_worker_management_is_admin_only(client, doctor_headers):
    payload = {"full_name": "Rosa Diaz", "age": 29, "gender": "female"}
    assert client.post("/api/workers", json=payload).status_code == 401
    assert client.post("/api/workers", json=payload, headers=doctor_headers).status_code == 403
    assert client.get("/api/workers", headers=doctor_headers).status_code == 403


def test_list_workers_newest_first_with_search(client, admin_headers, register_worker):
    maria = register_worker()
    wei = register_worker(full_name="Wei Chen", age=41, gender="male")

    listing = client.get("/api/workers", headers=admin_headers).json()
    assert listing["total"] == 2
    assert [w["worker_id"] for w in listing["workers"]] == [wei["worker_id"], maria["worker_id"]]
    assert listing["workers"][0]["visit_count"] == 0

    by_name = client.get("/api/workers", params={"search": "chen"}, headers=admin_headers).json()
    assert [w["worker_id"] for w in by_name["workers"]] == [wei["worker_id"]]

    by_id = client.get("/api/workers", params={"search": maria["worker_id"]}, headers=admin_headers).json()
    assert [w["full_name"] for w in by_id["workers"]] == ["Maria Santos"]


def test_get_worker_by_identifier(client, doctor_headers, register_worker):
    worker = register_worker()
    response = client.get(f"/api/workers/{worker['worker_id']}", headers=doctor_headers)
    assert response.status_code == 200
    assert response.json()["full_name"] == "Maria Santos"

    missing = client.get("/api/workers/WKR-999999", headers=doctor_headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Worker WKR-999999 not found"}


def test_worker_qr_png_round_trips(client, admin_headers, register_worker):
    worker = register_worker()
    response = client.get(
        f"/api/workers/{worker['worker_id']}/qr.png",
        params={"size": 400, "download": True},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert f"{worker['worker_id']}-qr-code.png" in response.headers["content-disposition"]
    assert qr_service.decode_image(response.content) == worker["worker_id"]


def test_worker_qr_svg_and_print(client, admin_headers, register_worker):
    worker = register_worker(full_name="Amara <Okafor>")

    svg = client.get(f"/api/workers/{worker['worker_id']}/qr.svg", headers=admin_headers)
    assert svg.status_code == 200
    assert svg.headers["content-type"].startswith("image/svg+xml")
    assert "<svg" in svg.text or ":svg" in svg.text

    page = client.get(f"/api/workers/{worker['worker_id']}/print", headers=admin_headers)
    assert page.status_code == 200
    assert "Digital Health Record" in page.text
    assert worker["worker_id"] in page.text
    assert "Amara &lt;Okafor&gt;" in page.text


def test_delete_worker_removes_visit_history(client, admin_headers, doctor_headers, register_worker):
    worker = register_worker()
    visit = client.post(
        f"/api/visits/workers/{worker['worker_id']}",
        json={"symptoms": "Cough", "diagnosis": "Bronchitis"},
        headers=doctor_headers,
    )
    assert visit.status_code == 201

    response = client.delete(f"/api/workers/{worker['worker_id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["deleted"] is True

    assert client.get(f"/api/workers/{worker['worker_id']}/visits", headers=admin_headers).status_code == 404
    assert client.get("/api/visits/mine", headers=doctor_headers).json()["total"] == 0
    stats = client.get("/api/dashboard/admin", headers=admin_headers).json()["stats"]
    assert stats["visits"] == 0
    assert stats["workers"] == 0


def test_deleted_worker_identifier_is_never_reissued(client, admin_headers, register_worker):
    first = register_worker()
    newest = register_worker(full_name="Wei Chen", age=41, gender="male")

    assert client.delete(f"/api/workers/{newest['worker_id']}", headers=admin_headers).status_code == 200
    replacement = register_worker(full_name="Rosa Diaz", age=29, gender="female")

    assert replacement["worker_id"] not in (first["worker_id"], newest["worker_id"])
    # The deleted worker's card must not resolve to anyone
    assert client.get(f"/api/workers/{newest['worker_id']}", headers=admin_headers).status_code == 404
