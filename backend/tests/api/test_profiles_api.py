"""
API Tests for Profiles
Tests for: self edits, theme, avatar upload/replace/remove, admin edits
"""
import os

from conftest import TEST_DIR, auth_headers_for

BASE = "/api/v1/profiles"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _stored_path(url):
    key = url.split("/media/", 1)[1]
    return os.path.join(TEST_DIR, "media", key)


class TestOwnProfile:
    async def test_update_me(self, client, student_headers):
        response = await client.patch(f"{BASE}/me", json={"department": "Science", "year_level": 10},
                                      headers=student_headers)

        assert response.status_code == 200
        assert response.json()["department"] == "Science"
        assert response.json()["year_level"] == 10

    async def test_theme_persists(self, client, student_headers):
        await client.put(f"{BASE}/me/theme", json={"theme": "dark"}, headers=student_headers)

        me = await client.get("/api/v1/auth/me", headers=student_headers)

        assert me.json()["theme"] == "dark"

    async def test_cannot_edit_someone_else(self, client, student_headers, make_user):
        other = await make_user("student")

        response = await client.patch(f"{BASE}/{other.id}", json={"first_name": "Pwned"}, headers=student_headers)

        assert response.status_code == 403

    async def test_admin_can_deactivate(self, client, admin_headers, student_user):
        response = await client.patch(f"{BASE}/{student_user.id}", json={"is_active": False}, headers=admin_headers)
        blocked = await client.get("/api/v1/auth/me", headers=auth_headers_for(student_user))

        assert response.json()["is_active"] is False
        assert blocked.status_code == 403


class TestAvatar:
    async def test_upload_stores_file(self, client, student_headers):
        response = await client.post(f"{BASE}/me/avatar", files={"file": ("me.png", PNG, "image/png")},
                                     headers=student_headers)

        assert response.status_code == 200
        url = response.json()["avatar_url"]
        assert url.startswith("http://test/media/avatars/")
        assert os.path.exists(_stored_path(url))

    async def test_replacing_removes_previous_file(self, client, student_headers):
        first = await client.post(f"{BASE}/me/avatar", files={"file": ("a.png", PNG, "image/png")},
                                  headers=student_headers)
        second = await client.post(f"{BASE}/me/avatar", files={"file": ("b.jpg", PNG, "image/jpeg")},
                                   headers=student_headers)

        assert not os.path.exists(_stored_path(first.json()["avatar_url"]))
        assert os.path.exists(_stored_path(second.json()["avatar_url"]))

    async def test_wrong_type_rejected(self, client, student_headers):
        response = await client.post(f"{BASE}/me/avatar", files={"file": ("notes.txt", b"hello", "text/plain")},
                                     headers=student_headers)

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "file"

    async def test_remove_avatar(self, client, student_headers):
        uploaded = await client.post(f"{BASE}/me/avatar", files={"file": ("me.png", PNG, "image/png")},
                                     headers=student_headers)

        response = await client.delete(f"{BASE}/me/avatar", headers=student_headers)

        assert response.json()["avatar_url"] is None
        assert not os.path.exists(_stored_path(uploaded.json()["avatar_url"]))
