"""Tests for the media router."""

from uuid import uuid4

from app.services.media_service import MediaService


def upload(client, name="cat.png", data=b"png-bytes", content_type="image/png"):
    return client.post("/media/upload", files={"file": (name, data, content_type)})


def test_upload_media(client, fake_storage):
    r = upload(client)
    assert r.status_code == 201
    data = r.json()
    assert data["file_name"] == "cat.png"
    assert data["storage_url"] in fake_storage.objects
    assert data["thumbnail_url"]


def test_upload_rejects_unsupported_type(client):
    r = upload(client, name="doc.pdf", content_type="application/pdf")
    assert r.status_code == 422


def test_upload_rejects_empty_file(client):
    assert upload(client, data=b"").status_code == 422


def test_list_get_download_delete(client, fake_storage):
    media_id = upload(client).json()["id"]

    listed = client.get("/media").json()
    assert [m["id"] for m in listed["items"]] == [media_id]

    assert client.get(f"/media/{media_id}").status_code == 200

    r = client.get(f"/media/{media_id}/download")
    assert r.status_code == 200
    assert r.content == b"png-bytes"
    assert r.headers["content-type"] == "image/jpeg"
    assert 'filename="cat.png"' in r.headers["content-disposition"]

    assert client.delete(f"/media/{media_id}").status_code == 204
    assert client.get(f"/media/{media_id}").status_code == 404
    assert fake_storage.objects == {}


def test_delete_refused_by_storage_is_502(client, fake_storage):
    media_id = upload(client).json()["id"]
    fake_storage.refuse_delete = True

    r = client.delete(f"/media/{media_id}")

    assert r.status_code == 502
    assert client.get(f"/media/{media_id}").status_code == 200


def test_foreign_media_is_hidden(client, db, setup_another_user, fake_storage):
    theirs = MediaService(db, fake_storage).upload(
        setup_another_user.id, "a.png", b"x", "image/png"
    )
    assert client.get(f"/media/{theirs.id}").status_code == 404
    assert client.get(f"/media/{theirs.id}/download").status_code == 404
    assert client.delete(f"/media/{theirs.id}").status_code == 404
    assert client.get(f"/media/{uuid4()}").status_code == 404
