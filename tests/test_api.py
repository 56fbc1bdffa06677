"""Tests for the public and admin HTTP routes."""
import io
import uuid
from unittest.mock import MagicMock

import pytest

import app.extensions as ext
from app.services import storage_service

ADMIN = "/api/v1/admin/melhaf"


@pytest.fixture
def s3(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(storage_service, "_get_client", lambda: client)
    return client


def _create_collection(client, type_id, name="Azur", colors=None):
    return client.post(
        f"{ADMIN}/collections",
        json={
            "type_id": type_id,
            "name": name,
            "colors": colors or [{"name": "Sky", "price": 25.0}],
        },
        headers={"X-Admin-Id": "admin-1"},
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code in (200, 503)
    data = resp.get_json()
    assert "status" in data


def test_health_does_not_leak_internal_errors(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database password leaked")

    monkeypatch.setattr(ext.db.session, "execute", boom)

    resp = client.get("/health")
    assert resp.status_code == 503
    data = resp.get_json()
    assert data["db"] == "error"
    assert "password" not in str(data).lower()


def test_create_type_and_collection(client):
    resp = client.post(f"{ADMIN}/types", json={"name": "Voile", "name_ar": "فوال"})
    assert resp.status_code == 201
    type_id = resp.get_json()["data"]["id"]

    resp = _create_collection(
        client,
        type_id,
        colors=[{"name": "Sky", "price": 25.0}, {"name": "Navy", "price": "27.50"}],
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["message"] == "Collection created with 2 colors"
    assert [c["name"] for c in body["data"]["colors"]] == ["Sky", "Navy"]
    assert all(len(c["ean"]) == 13 for c in body["data"]["colors"])

    listed = client.get(f"{ADMIN}/collections?type_id={type_id}").get_json()["data"]
    assert [c["name"] for c in listed] == ["Azur"]
    assert listed[0]["type_name"] == "Voile"


def test_create_collection_validation_error(client, melhaf_type):
    resp = _create_collection(client, str(melhaf_type.id), colors=[{"name": "Sky"}])

    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert error["kind"] == "ValidationError"
    assert error["detail"] == {"field": "price", "index": 0}


def test_create_collection_huge_price(client, melhaf_type):
    resp = _create_collection(
        client, str(melhaf_type.id), colors=[{"name": "Sky", "price": 1e30}]
    )

    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert error["kind"] == "ValidationError"
    assert error["detail"] == {"field": "price", "index": 0}


def test_inventory_out_of_range(client, make_collection):
    variant_id = str(make_collection().variants[0].id)

    resp = client.put(
        f"{ADMIN}/colors/{variant_id}/inventory",
        json={"available": 10 ** 12, "reserved": 0, "reorder_point": 0},
    )
    assert resp.status_code == 400


def test_create_collection_without_colors(client, melhaf_type):
    resp = client.post(
        f"{ADMIN}/collections", json={"type_id": str(melhaf_type.id), "name": "Azur"}
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Collection must have at least one color"


def test_create_collection_unknown_type(client):
    resp = _create_collection(client, str(uuid.uuid4()))
    assert resp.status_code == 404
    assert resp.get_json()["error"]["kind"] == "NotFoundError"


def test_non_object_body_is_rejected(client):
    resp = client.post(f"{ADMIN}/types", json=["Voile"])
    assert resp.status_code == 400


def test_admin_token_enforced_when_configured(app, client):
    app.config["ADMIN_API_TOKEN"] = "s3cret"

    resp = client.get(f"{ADMIN}/types")
    assert resp.status_code == 403
    assert resp.get_json()["error"]["kind"] == "Forbidden"

    resp = client.get(f"{ADMIN}/types", headers={"X-Admin-Token": "wrong"})
    assert resp.status_code == 403

    resp = client.get(f"{ADMIN}/types", headers={"X-Admin-Token": "s3cret"})
    assert resp.status_code == 200


def test_update_collection_and_inventory(client, make_collection):
    result = make_collection()
    collection_id = str(result.collection_id)
    variant_id = str(result.variants[0].id)

    resp = client.put(f"{ADMIN}/collections/{collection_id}", json={"sort_order": 4})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["sort_order"] == 4

    resp = client.put(
        f"{ADMIN}/colors/{variant_id}/inventory",
        json={"available": 9, "reserved": 1, "reorder_point": 2},
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"available": 9, "reserved": 1, "reorder_point": 2}

    color = client.get(f"{ADMIN}/colors/{variant_id}").get_json()["data"]
    assert color["stock"]["available"] == 9
    assert color["price"] == 25.0


def test_create_color(client, make_collection):
    collection_id = str(make_collection().collection_id)

    resp = client.post(
        f"{ADMIN}/colors",
        json={"collection_id": collection_id, "name": "Navy", "price": 27.5},
    )

    assert resp.status_code == 201
    assert len(resp.get_json()["data"]["ean"]) == 13
    listed = client.get(f"{ADMIN}/colors?collection_id={collection_id}").get_json()
    assert len(listed["data"]) == 2


def test_upload_color_image(client, make_collection, s3, png_bytes):
    variant_id = str(make_collection().variants[0].id)

    resp = client.post(
        f"{ADMIN}/colors/{variant_id}/images",
        data={"image": (io.BytesIO(png_bytes), "sky.png"), "position": "1"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["position"] == 1
    assert data["url"].startswith("https://cdn.test/colors/")


def test_upload_color_image_requires_file(client, make_collection, s3):
    variant_id = str(make_collection().variants[0].id)

    resp = client.post(
        f"{ADMIN}/colors/{variant_id}/images", data={}, content_type="multipart/form-data"
    )
    assert resp.status_code == 400


def test_upload_video(client, make_collection, s3):
    collection_id = str(make_collection().collection_id)

    resp = client.post(
        f"{ADMIN}/videos",
        data={
            "collection_id": collection_id,
            "title": "Azur lookbook",
            "duration": "45",
            "video": (io.BytesIO(b"\x00" * 128), "azur.mp4", "video/mp4"),
        },
        content_type="multipart/form-data",
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["video_url"].startswith("https://cdn.test/videos/")
    assert data["thumbnail_url"] is None

    feed = client.get("/api/v1/melhaf/videos").get_json()["data"]
    assert [v["title"] for v in feed] == ["Azur lookbook"]
    assert feed[0]["duration"] == 45


def test_upload_video_bad_duration(client, make_collection, s3):
    resp = client.post(
        f"{ADMIN}/videos",
        data={
            "collection_id": str(make_collection().collection_id),
            "title": "Lookbook",
            "duration": "long",
            "video": (io.BytesIO(b"\x00" * 16), "a.mp4", "video/mp4"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    s3.put_object.assert_not_called()


def test_like_requires_identity(client, make_collection, make_video):
    video_id = make_video(make_collection().collection_id)

    resp = client.post(f"/api/v1/melhaf/videos/{video_id}/like")

    assert resp.status_code == 401
    assert resp.get_json() == {
        "success": False,
        "error": {"kind": "Unauthorized", "message": "Authentication required"},
    }


def test_like_and_react(client, make_collection, make_video):
    video_id = make_video(make_collection().collection_id)
    headers = {"X-User-Id": "u1"}

    resp = client.post(f"/api/v1/melhaf/videos/{video_id}/like", headers=headers)
    assert resp.get_json()["data"] == {"liked": True, "like_count": 1}

    resp = client.post(
        f"/api/v1/melhaf/videos/{video_id}/react", json={"reaction": "🔥"}, headers=headers
    )
    assert resp.get_json()["data"] == {"active": True, "symbol": "🔥", "counts": {"🔥": 1}}

    resp = client.get(f"/api/v1/melhaf/videos/{video_id}/interactions", headers=headers)
    assert resp.get_json()["data"] == {
        "like_count": 1,
        "counts": {"🔥": 1},
        "viewer_liked": True,
        "viewer_symbols": ["🔥"],
    }

    anonymous = client.get(f"/api/v1/melhaf/videos/{video_id}/interactions").get_json()
    assert anonymous["data"]["viewer_liked"] is False


def test_react_without_emoji(client, make_collection, make_video):
    video_id = make_video(make_collection().collection_id)

    resp = client.post(
        f"/api/v1/melhaf/videos/{video_id}/react", json={}, headers={"X-User-Id": "u1"}
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Reaction emoji required"


def test_like_unknown_video(client):
    resp = client.post(
        f"/api/v1/melhaf/videos/{uuid.uuid4()}/like", headers={"X-User-Id": "u1"}
    )
    assert resp.status_code == 404


def test_feed_limit_param(client, make_collection, make_video):
    collection_id = make_collection().collection_id
    for n in range(3):
        make_video(collection_id, f"V{n}", sort_order=n)

    resp = client.get("/api/v1/melhaf/videos?limit=2")
    assert resp.status_code == 200
    assert [v["title"] for v in resp.get_json()["data"]] == ["V0", "V1"]


def test_barcode_scan(client, make_collection):
    created = make_collection().variants[0]

    resp = client.post("/api/v1/barcode/scan", json={"ean": created.ean})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["id"] == str(created.id)

    resp = client.post("/api/v1/barcode/scan", json={"ean": "123"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Invalid EAN format"


def test_public_color_hides_inactive(client, make_collection):
    result = make_collection(
        colors=[{"name": "Sky", "price": 1}, {"name": "Off", "price": 1, "is_active": False}]
    )
    active, inactive = (str(v.id) for v in result.variants)

    assert client.get(f"/api/v1/melhaf/colors/{active}").status_code == 200
    assert client.get(f"/api/v1/melhaf/colors/{inactive}").status_code == 404


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["kind"] == "HTTPError"
