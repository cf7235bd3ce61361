"""End-to-end tests of the catalogue endpoints through the FastAPI app."""

from datetime import datetime, timedelta, timezone

from tests.helpers import upload_pdf


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"


def test_upload_and_list(client):
    catalogue = upload_pdf(client, "Extruders.pdf", description="Main brochure", category="extruders")

    assert catalogue["originalName"] == "Extruders.pdf"
    assert catalogue["downloadCount"] == 0
    assert catalogue["fileName"].startswith("catalogue-")

    response = client.get("/api/catalogue", params={"search": "extr"})
    body = response.json()
    assert body["success"] is True
    assert [item["id"] for item in body["data"]["catalogues"]] == [catalogue["id"]]
    assert body["data"]["pagination"] == {"current": 1, "pages": 1, "total": 1, "limit": 20}


def test_upload_rejects_non_pdf(client):
    response = client.post(
        "/api/catalogue/upload",
        files={"catalogue": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_file"


def test_upload_without_file(client):
    response = client.post("/api/catalogue/upload", data={"description": "nothing"})

    assert response.status_code == 400
    assert response.json()["error"] == "no_file"


def test_download_streams_file_and_counts(client):
    content = b"%PDF-1.4 " + b"0" * 200_000
    catalogue = upload_pdf(client, "Extruders.pdf", content)

    response = client.get(f"/api/catalogue/{catalogue['id']}/download")

    assert response.status_code == 200
    assert response.content == content
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="Extruders.pdf"'
    assert response.headers["content-length"] == str(len(content))

    detail = client.get(f"/api/catalogue/{catalogue['id']}").json()["data"]["catalogue"]
    assert detail["downloadCount"] == 1


def test_deleted_catalogue_is_not_downloadable(client):
    catalogue = upload_pdf(client, "Retired.pdf")
    assert client.delete(f"/api/catalogue/{catalogue['id']}").status_code == 200

    response = client.get(f"/api/catalogue/{catalogue['id']}/download")

    assert response.status_code == 404
    body = response.json()
    assert body == {"success": False, "data": {}, "message": "Catalogue not found", "error": "catalogue_not_found"}
    downloads = client.get("/api/admin/catalogue/downloads").json()["data"]
    assert downloads["pagination"]["total"] == 0


def test_update_catalogue(client):
    catalogue = upload_pdf(client, "Extruders.pdf")

    response = client.put(
        f"/api/catalogue/{catalogue['id']}",
        json={"description": "Updated text", "category": "lines"},
    )

    assert response.status_code == 200
    updated = response.json()["data"]["catalogue"]
    assert updated["description"] == "Updated text"
    assert updated["category"] == "lines"


def test_update_unknown_catalogue(client):
    response = client.put("/api/catalogue/does-not-exist", json={"description": "x"})

    assert response.status_code == 404
    assert response.json()["error"] == "catalogue_not_found"


def test_product_download_links(client):
    main = upload_pdf(client, "Twin Screw Extruders.pdf")
    data = upload_pdf(client, "Twin Screw Extruders - Technical Data.pdf")

    response = client.get("/api/catalogue/product/1/download")

    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload["product"] == "twin-screw-extruders"
    assert [item["catalogueId"] for item in payload["files"]] == [main["id"], data["id"]]
    assert payload["files"][0]["url"].endswith(f"/api/catalogue/{main['id']}/download")

    same = client.get("/api/catalogue/product/twin-screw-extruders/download").json()["data"]
    assert [item["catalogueId"] for item in same["files"]] == [main["id"], data["id"]]


def test_unknown_product(client):
    response = client.get("/api/catalogue/product/Zzz/download")

    assert response.status_code == 404
    assert response.json()["error"] == "product_not_found"


def test_product_without_uploaded_files(client):
    response = client.get("/api/catalogue/product/pelletizing-lines/download")

    assert response.status_code == 404
    assert response.json()["error"] == "no_catalogues_found"


def test_request_email(client, fake_mailer):
    upload_pdf(client, "Company Profile.pdf")

    response = client.post(
        "/api/catalogue/request-email",
        json={"productId": 6, "email": "lead@example.com", "name": "Sam Lead"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["data"]["sent"] == ["Company Profile.pdf"]
    (message,) = fake_mailer.sent_to("lead@example.com")
    assert message.attachments[0].filename == "Company Profile.pdf"


def test_request_email_invalid_address(client):
    response = client.post(
        "/api/catalogue/request-email",
        json={"productId": "company-profile", "email": "nope"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_failed"


def test_request_email_send_failure(client, fake_mailer):
    upload_pdf(client, "Company Profile.pdf")
    fake_mailer.fail = True

    response = client.post(
        "/api/catalogue/request-email",
        json={"productId": "company-profile", "email": "lead@example.com"},
    )

    assert response.status_code == 502
    assert response.json()["error"] == "email_send_failed"


def test_legacy_tracking_dedupes_within_window(client):
    payload = {
        "catalogueUrls": [{"url": "https://example.com/a.pdf", "title": "Brochure.pdf", "type": "pdf"}],
        "productId": 1,
        "productTitle": "Twin Screw Extruders",
    }

    first = client.post("/api/catalogue/download", json=payload)
    second = client.post("/api/catalogue/download", json=payload)

    assert first.status_code == 201
    assert first.json()["data"]["trackedCatalogues"] == 1
    assert second.json()["data"]["trackedCatalogues"] == 0
    assert second.json()["data"]["suppressedCatalogues"] == 1
    downloads = client.get("/api/admin/catalogue/downloads").json()["data"]
    assert downloads["pagination"]["total"] == 1


def test_legacy_tracking_outside_window(client):
    stale = (datetime.now(timezone.utc) - timedelta(hours=25)).isoformat()
    item = {"url": None, "title": "Brochure.pdf"}

    client.post("/api/catalogue/download", json={"catalogueUrls": [item], "downloadedAt": stale})
    response = client.post("/api/catalogue/download", json={"catalogueUrls": [item]})

    assert response.json()["data"]["trackedCatalogues"] == 1
    downloads = client.get("/api/admin/catalogue/downloads").json()["data"]
    assert downloads["pagination"]["total"] == 2


def test_legacy_tracking_accepts_empty_batch(client):
    response = client.post(
        "/api/catalogue/download",
        json={"productId": 1, "productTitle": "Twin Screw Extruders"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["trackedCatalogues"] == 0
    assert data["productId"] == 1


def test_legacy_tracking_still_accepts_catalogues_key(client):
    response = client.post("/api/catalogue/download", json={"catalogues": [{"title": "Brochure.pdf"}]})

    assert response.status_code == 201
    assert response.json()["data"]["trackedCatalogues"] == 1


def test_download_requires_login(anonymous_client):
    response = anonymous_client.get("/api/catalogue/some-id/download")

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["error"] == "unauthorized"


def test_guest_can_track_legacy_downloads(anonymous_client):
    response = anonymous_client.post(
        "/api/catalogue/download",
        json={"catalogueUrls": [{"title": "Brochure.pdf"}]},
    )

    assert response.status_code == 201
    assert response.json()["data"]["trackedCatalogues"] == 1


def test_forwarded_for_header_is_ignored_by_default(client):
    catalogue = upload_pdf(client, "Extruders.pdf")

    client.get(f"/api/catalogue/{catalogue['id']}/download", headers={"X-Forwarded-For": "203.0.113.7"})

    downloads = client.get("/api/admin/catalogue/downloads").json()["data"]["downloads"]
    assert downloads[0]["ipAddress"] == "testclient"
