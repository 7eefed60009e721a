from pathlib import Path


def test_list_members_hides_password_hashes(client):
    resp = client.get("/api/members")
    assert resp.status_code == 200
    members = resp.json()
    assert [m["id"] for m in members] == ["alice-cohen", "dana", "AB-12"]
    assert all("password_hash" not in m for m in members)


def test_search_members(client):
    resp = client.get("/api/members/search/PAINT")
    assert [m["id"] for m in resp.json()] == ["AB-12"]
    resp = client.get("/api/members/search/פסל")
    assert [m["id"] for m in resp.json()] == ["dana"]


def test_get_member_with_courses_and_gallery(client, seed):
    resp = client.get("/api/members/AB-12")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name_en"] == "Avi Ben"
    assert [c["id"] for c in data["teaching_courses"]] == [seed["oil"]]
    assert data["teaching_courses"][0]["title_en"] == "Oil Painting"
    assert {c["id"] for c in data["all_courses"]} == {seed["oil"], seed["clay"]}
    assert [g["id"] for g in data["gallery_items"]] == [seed["sunset"]]


def test_get_unknown_member(client):
    resp = client.get("/api/members/ghost")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Member not found"}


def test_owner_updates_profile(client, auth_headers):
    resp = client.patch("/api/members/dana", json={"name_en": "Dana L."}, headers=auth_headers("dana"))
    assert resp.status_code == 200
    data = resp.json()
    assert data["name_en"] == "Dana L."
    assert data["role_en"] == "Sculptor"


def test_update_other_member_is_forbidden(client, auth_headers):
    for body in ({"name_en": "Hacked"}, {}, {"name_en": 5, "id": "dana"}):
        resp = client.patch("/api/members/AB-12", json=body, headers=auth_headers("dana"))
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}
    assert client.get("/api/members/AB-12").json()["name_en"] == "Avi Ben"


def test_update_requires_session(client):
    resp = client.patch("/api/members/dana", json={"name_en": "X"})
    assert resp.status_code == 401


def test_gallery_item_lifecycle(client, auth_headers):
    headers = auth_headers("dana")
    resp = client.post(
        "/api/members/dana/gallery",
        json={"title_en": "Torso", "title_he": "גו", "image_url": "https://img.example/torso.jpg"},
        headers=headers,
    )
    assert resp.status_code == 201
    item = resp.json()
    assert item["artist_id"] == "dana"
    assert item["artist"]["id"] == "dana"

    resp = client.patch(
        f"/api/members/dana/gallery/{item['id']}", json={"description_en": "Marble"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["description_en"] == "Marble"
    assert resp.json()["title_en"] == "Torso"

    first = client.delete(f"/api/members/dana/gallery/{item['id']}", headers=headers)
    assert first.status_code == 204
    second = client.delete(f"/api/members/dana/gallery/{item['id']}", headers=headers)
    assert second.status_code == 404
    assert client.get(f"/api/gallery/{item['id']}").status_code == 404


def test_cannot_touch_another_members_gallery_item(client, auth_headers, seed):
    headers = auth_headers("dana")
    resp = client.patch(f"/api/members/dana/gallery/{seed['sunset']}", json={"title_en": "Mine"}, headers=headers)
    assert resp.status_code == 404
    resp = client.delete(f"/api/members/AB-12/gallery/{seed['sunset']}", headers=headers)
    assert resp.status_code == 403
    assert client.get(f"/api/gallery/{seed['sunset']}").json()["title_en"] == "Sunset"


def test_teaching_assignment(client, auth_headers, seed):
    headers = auth_headers("dana")
    url = f"/api/members/dana/courses/{seed['oil']}/teach"

    resp = client.post(url, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"course_id": seed["oil"], "teacher_id": "dana"}
    assert client.post(url, headers=headers).status_code == 200

    teachers = client.get(f"/api/courses/{seed['oil']}").json()["teachers"]
    assert [t["id"] for t in teachers] == ["AB-12", "dana"]

    assert client.delete(url, headers=headers).status_code == 204
    teachers = client.get(f"/api/courses/{seed['oil']}").json()["teachers"]
    assert [t["id"] for t in teachers] == ["AB-12"]


def test_teaching_assignment_unknown_course(client, auth_headers):
    resp = client.post("/api/members/dana/courses/9999/teach", headers=auth_headers("dana"))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Course not found"}


def test_teaching_assignment_for_someone_else_is_forbidden(client, auth_headers, seed):
    resp = client.post(f"/api/members/AB-12/courses/{seed['clay']}/teach", headers=auth_headers("dana"))
    assert resp.status_code == 403


def test_member_creates_updates_and_deletes_course(client, auth_headers):
    headers = auth_headers("AB-12")
    resp = client.post(
        "/api/members/AB-12/courses",
        json={"title_en": "Watercolor", "name_he": "צבעי מים", "description_en": "Wet on wet"},
        headers=headers,
    )
    assert resp.status_code == 201
    course = resp.json()
    assert course["name_en"] == "Watercolor"
    assert course["title_he"] == "צבעי מים"
    assert [t["id"] for t in course["teachers"]] == ["AB-12"]

    resp = client.patch(
        f"/api/members/AB-12/courses/{course['id']}", json={"description_en": "Dry brush"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["description_en"] == "Dry brush"

    resp = client.patch(
        f"/api/members/dana/courses/{course['id']}", json={"name_en": "Mine"}, headers=auth_headers("dana")
    )
    assert resp.status_code == 403
    assert resp.json() == {"error": "Only a teacher of this course may change it"}

    assert client.delete(f"/api/members/AB-12/courses/{course['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/courses/{course['id']}").status_code == 404
    assert client.delete(f"/api/members/AB-12/courses/{course['id']}", headers=headers).status_code == 404


def test_upload_image(client, auth_headers, settings):
    resp = client.post(
        "/api/members/upload-image",
        files={"image": ("portrait.PNG", b"\x89PNG fake image", "image/png")},
        headers=auth_headers("dana"),
    )
    assert resp.status_code == 200
    url = resp.json()["url"]
    assert url.startswith("/uploads/") and url.endswith(".png")
    stored = Path(settings.upload_dir) / url.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"\x89PNG fake image"
    assert client.get(url).content == b"\x89PNG fake image"


def test_upload_image_validation(client, auth_headers):
    headers = auth_headers("dana")
    resp = client.post("/api/members/upload-image", headers=headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "No image file provided"}

    resp = client.post(
        "/api/members/upload-image",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/members/upload-image", files={"image": ("a.png", b"x", "image/png")}
    )
    assert resp.status_code == 401


def test_upload_rejects_non_image_suffix_and_stores_by_content_type(client, auth_headers, settings):
    headers = auth_headers("dana")
    resp = client.post(
        "/api/members/upload-image",
        files={"image": ("x.html", b"<script>alert(1)</script>", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Only PNG, JPEG, GIF and WebP images can be uploaded"}
    assert not any(Path(settings.upload_dir).iterdir())

    resp = client.post(
        "/api/members/upload-image",
        files={"image": ("photo.jpeg", b"\xff\xd8 fake jpeg", "image/jpeg")},
        headers=headers,
    )
    assert resp.status_code == 200
    url = resp.json()["url"]
    assert url.endswith(".jpg")
    assert client.get(url).headers["content-type"] == "image/jpeg"
