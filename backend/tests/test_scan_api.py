import io

from PIL import Image

from medicare.services.qr_service import qr_service


def test_manual_entry_resolves_worker(client, doctor_headers, register_worker):
    worker = register_worker()
    response = client.post(
        "/api/scan/manual",
        json={"worker_id": f"  {worker['worker_id']} "},
        headers=doctor_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "manual"
    assert body["worker"]["full_name"] == "Maria Santos"


def test_manual_entry_length_bounds(client, doctor_headers):
    short = client.post("/api/scan/manual", json={"worker_id": "ab"}, headers=doctor_headers)
    assert short.status_code == 400
    assert short.json() == {"error": "Please enter a valid Worker ID."}

    long = client.post("/api/scan/manual", json={"worker_id": "W" * 65}, headers=doctor_headers)
    assert long.status_code == 400

    unknown = client.post("/api/scan/manual", json={"worker_id": "abc"}, headers=doctor_headers)
    assert unknown.status_code == 404


def test_scan_uploaded_qr_image(client, doctor_headers, register_worker):
    worker = register_worker()
    png = qr_service.encode_png(worker["worker_id"], size=400)
    response = client.post(
        "/api/scan/image",
        files={"file": ("card.png", png, "image/png")},
        headers=doctor_headers,
    )
    assert response.status_code == 200, response.text
    assert response.json()["worker_id"] == worker["worker_id"]
    assert response.json()["source"] == "image"


def test_scan_image_without_code(client, doctor_headers):
    buf = io.BytesIO()
    Image.new("RGB", (320, 320), "white").save(buf, format="PNG")
    response = client.post(
        "/api/scan/image",
        files={"file": ("blank.png", buf.getvalue(), "image/png")},
        headers=doctor_headers,
    )
    assert response.status_code == 422
    assert response.json() == {"error": "No QR code found in image"}


def test_scan_is_doctor_only(client, admin_headers):
    response = client.post("/api/scan/manual", json={"worker_id": "WKR-000001"}, headers=admin_headers)
    assert response.status_code == 403


def test_scan_image_rejects_oversized_upload(client, doctor_headers, register_worker, monkeypatch):
    from medicare.config import get_settings

    worker = register_worker()
    png = qr_service.encode_png(worker["worker_id"], size=400)
    monkeypatch.setattr(get_settings(), "scan_max_upload_bytes", len(png) - 1)

    response = client.post(
        "/api/scan/image",
        files={"file": ("card.png", png, "image/png")},
        headers=doctor_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": f"Image is too large (max {len(png) - 1} bytes)"}
