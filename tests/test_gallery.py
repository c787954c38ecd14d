# tests/test_gallery.py

import os

from elitehome.core.config import settings


def upload(client, headers, name="deck.jpg", caption="Deck restain"):
    return client.post(
        "/admin/gallery",
        data={"caption": caption},
        files={"image": (name, b"jpeg bytes", "image/jpeg")},
        headers=headers,
    )


def test_upload_and_public_listing(client, auth_headers):
    admin = auth_headers("a1", "admin")
    assert upload(client, admin, "deck.jpg", "Deck restain").status_code == 201
    assert upload(client, admin, "villa.png", "Villa exterior").status_code == 201

    response = client.get("/gallery")

    assert response.status_code == 200
    images = response.json()["data"]["images"]
    assert [i["caption"] for i in images] == ["Villa exterior", "Deck restain"]


def test_upload_rejects_non_images(client, auth_headers):
    response = client.post(
        "/admin/gallery",
        data={"caption": "oops"},
        files={"image": ("quote.pdf", b"%PDF", "application/pdf")},
        headers=auth_headers("a1", "admin"),
    )
    assert response.status_code == 400


def test_delete_removes_file(client, auth_headers):
    admin = auth_headers("a1", "admin")
    image = upload(client, admin).json()["data"]["image"]
    path = os.path.join(settings.UPLOAD_DIR, image["image"])
    assert os.path.exists(path)

    response = client.delete(f"/admin/gallery/{image['id']}", headers=admin)

    assert response.status_code == 200
    assert not os.path.exists(path)
    assert client.get("/gallery").json()["data"]["images"] == []
    assert client.delete(f"/admin/gallery/{image['id']}", headers=admin).status_code == 404


def test_gallery_upload_is_admin_only(client, auth_headers):
    assert upload(client, auth_headers("c1", "customer")).status_code == 403
