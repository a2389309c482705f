"""
Tests for the admin console routes
"""
import io
from datetime import datetime, timedelta

import pytest
from PIL import Image

from portfolio_api.contact.database import ContactMessage
from portfolio_api.content.database import Resume

PROJECT = {
    "title": "Packet sniffer",
    "description": "A small network tool",
    "technologies": "Python, Scapy",
    "github_url": "https://github.com/example/sniffer",
}

POST = {
    "title": "Hello world",
    "slug": "hello-world",
    "excerpt": "First post",
    "content": "<p>Hi</p><script>alert(1)</script>",
    "tags": ["intro"],
    "published": True,
}


def png_bytes(size=(40, 30), mode="RGBA") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, (200, 10, 10, 128) if mode == "RGBA" else (200, 10, 10)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestAdminAccess:

    def test_missing_token_is_unauthorized(self, client):
        response = client.get("/api/admin/projects")

        assert response.status_code == 401
        assert response.json() == {"detail": "Authentication required"}

    def test_invalid_token_is_unauthorized(self, client):
        response = client.get("/api/admin/projects", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_non_admin_is_forbidden(self, client, user_headers):
        response = client.get("/api/admin/messages", headers=user_headers)

        assert response.status_code == 403
        assert "Admin access required" in response.json()["detail"]

    def test_non_admin_cannot_write(self, client, user_headers):
        response = client.post("/api/admin/projects", json=PROJECT, headers=user_headers)
        assert response.status_code == 403


class TestProjectAdmin:

    def test_create_update_delete(self, client, admin_headers):
        created = client.post("/api/admin/projects", json=PROJECT, headers=admin_headers)
        assert created.status_code == 201
        project = created.json()
        assert project["technologies"] == ["Python", "Scapy"]
        assert project["featured"] is False

        updated = client.patch(
            f"/api/admin/projects/{project['id']}",
            json={"featured": True, "github_url": ""},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["featured"] is True
        assert updated.json()["github_url"] is None
        assert updated.json()["title"] == "Packet sniffer"

        public = client.get("/api/portfolio/projects").json()
        assert [p["id"] for p in public] == [project["id"]]

        deleted = client.delete(f"/api/admin/projects/{project['id']}", headers=admin_headers)
        assert deleted.status_code == 204
        assert client.get("/api/portfolio/projects").json() == []

    def test_null_does_not_clear_required_flag(self, client, admin_headers):
        project = client.post("/api/admin/projects", json=PROJECT, headers=admin_headers).json()

        response = client.patch(
            f"/api/admin/projects/{project['id']}",
            json={"featured": None, "display_order": 3},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["featured"] is False
        assert response.json()["display_order"] == 3

    def test_null_title_is_rejected(self, client, admin_headers):
        project = client.post("/api/admin/projects", json=PROJECT, headers=admin_headers).json()

        response = client.patch(f"/api/admin/projects/{project['id']}", json={"title": None}, headers=admin_headers)

        assert response.status_code == 422

    def test_invalid_url_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/projects",
            json={**PROJECT, "demo_url": "javascript:alert(1)"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_unknown_project(self, client, admin_headers):
        response = client.patch("/api/admin/projects/missing", json={"title": "x"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Project not found"}


class TestBlogAdmin:

    def test_content_is_sanitized(self, client, admin_headers):
        response = client.post("/api/admin/blog", json=POST, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["content"] == "<p>Hi</p>"

    def test_duplicate_slug_conflicts(self, client, admin_headers):
        client.post("/api/admin/blog", json=POST, headers=admin_headers)

        response = client.post("/api/admin/blog", json={**POST, "title": "Other"}, headers=admin_headers)

        assert response.status_code == 409
        assert response.json() == {"detail": "A blog post with this slug already exists"}

    def test_slug_change_to_existing_conflicts(self, client, admin_headers):
        client.post("/api/admin/blog", json=POST, headers=admin_headers)
        other = client.post("/api/admin/blog", json={**POST, "slug": "second-post"}, headers=admin_headers).json()

        response = client.patch(f"/api/admin/blog/{other['id']}", json={"slug": "hello-world"}, headers=admin_headers)

        assert response.status_code == 409

    def test_invalid_slug_is_rejected(self, client, admin_headers):
        response = client.post("/api/admin/blog", json={**POST, "slug": "Not A Slug!"}, headers=admin_headers)
        assert response.status_code == 422

    def test_drafts_are_listed_for_admin_only(self, client, admin_headers):
        client.post("/api/admin/blog", json={**POST, "published": False}, headers=admin_headers)

        assert len(client.get("/api/admin/blog", headers=admin_headers).json()) == 1
        assert client.get("/api/portfolio/blog").json() == []


class TestOtherContentAdmin:

    def test_certification_lifecycle(self, client, admin_headers):
        created = client.post(
            "/api/admin/certifications",
            json={"title": "OSCP", "issuer": "OffSec", "issue_date": "2024-03-01", "certification_type": "ctf"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        certification = created.json()
        assert certification["certification_type"] == "ctf"

        updated = client.patch(
            f"/api/admin/certifications/{certification['id']}",
            json={"certification_type": "professional"},
            headers=admin_headers,
        )
        assert updated.json()["certification_type"] == "professional"

        assert client.delete(f"/api/admin/certifications/{certification['id']}", headers=admin_headers).status_code == 204

    def test_skill_proficiency_is_validated(self, client, admin_headers):
        response = client.post(
            "/api/admin/skills",
            json={"name": "Rust", "category": "Languages", "proficiency": "wizard"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_skill_create(self, client, admin_headers):
        response = client.post(
            "/api/admin/skills",
            json={"name": "Rust", "category": "Languages", "proficiency": "advanced"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["proficiency"] == "advanced"

    def test_achievement_create_and_update(self, client, admin_headers):
        created = client.post(
            "/api/admin/achievements",
            json={"title": "Talk", "description": "Gave a talk", "date": "2024-06-01"},
            headers=admin_headers,
        ).json()

        response = client.patch(
            f"/api/admin/achievements/{created['id']}",
            json={"date": "2024-07-15"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["date"] == "2024-07-15"

    def test_delete_unknown_skill(self, client, admin_headers):
        response = client.delete("/api/admin/skills/missing", headers=admin_headers)
        assert response.status_code == 404


class TestResumeAdmin:

    def test_put_replaces_current_resume(self, client, admin_headers, db_session):
        first = client.put(
            "/api/admin/resume",
            json={"file_url": "https://example.com/uploads/resumes/old.pdf", "file_name": "old.pdf"},
            headers=admin_headers,
        )
        assert first.status_code == 200

        second = client.put(
            "/api/admin/resume",
            json={"file_url": "https://example.com/uploads/resumes/new.pdf", "file_name": "new.pdf", "file_size": 42},
            headers=admin_headers,
        )

        assert second.status_code == 200
        db_session.expire_all()
        assert [r.file_name for r in db_session.query(Resume).all()] == ["new.pdf"]
        assert client.get("/api/portfolio/resume").json()["file_name"] == "new.pdf"

    def test_relative_url_is_rejected(self, client, admin_headers):
        response = client.put(
            "/api/admin/resume",
            json={"file_url": "/uploads/resumes/cv.pdf", "file_name": "cv.pdf"},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestContactMessagesAdmin:

    @pytest.fixture
    def messages(self, db_session):
        now = datetime.utcnow()
        rows = [
            ContactMessage(name=f"Sender {i}", email=f"s{i}@example.com", message="Hello",
                           created_at=now - timedelta(minutes=i))
            for i in range(3)
        ]
        db_session.add_all(rows)
        db_session.commit()
        return [row.id for row in rows]

    def test_list_newest_first(self, client, admin_headers, messages):
        data = client.get("/api/admin/messages", headers=admin_headers).json()

        assert data["total"] == 3
        assert [m["name"] for m in data["messages"]] == ["Sender 0", "Sender 1", "Sender 2"]

    def test_pagination(self, client, admin_headers, messages):
        data = client.get("/api/admin/messages", params={"limit": 1, "offset": 1}, headers=admin_headers).json()

        assert data["total"] == 3
        assert [m["name"] for m in data["messages"]] == ["Sender 1"]

    def test_delete_message(self, client, admin_headers, messages):
        response = client.delete(f"/api/admin/messages/{messages[0]}", headers=admin_headers)

        assert response.status_code == 204
        assert client.get("/api/admin/messages", headers=admin_headers).json()["total"] == 2

    def test_delete_unknown_message(self, client, admin_headers):
        response = client.delete("/api/admin/messages/missing", headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Message not found"}


class TestUploads:

    def test_image_is_reencoded_as_jpeg(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/project-images",
            files={"file": ("shot.png", png_bytes(), "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["url"].startswith("http://testserver/uploads/project-images/")
        assert data["url"].endswith(".jpg")
        assert data["file_name"] == data["url"].rsplit("/", 1)[-1]

        served = client.get(data["url"].replace("http://testserver", ""))
        assert served.status_code == 200
        assert Image.open(io.BytesIO(served.content)).format == "JPEG"

    def test_large_image_is_downscaled(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/blog-images",
            files={"file": ("wide.png", png_bytes(size=(3000, 1000), mode="RGB"), "image/png")},
            headers=admin_headers,
        )

        served = client.get(response.json()["url"].replace("http://testserver", ""))
        width, height = Image.open(io.BytesIO(served.content)).size
        assert width == 2000
        assert height in (666, 667)

    def test_non_image_content_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/project-images",
            files={"file": ("fake.png", b"definitely not an image", "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid image file")

    def test_disallowed_type_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/blog-images",
            files={"file": ("page.html", b"<html></html>", "text/html")},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid file type")

    def test_resume_pdf(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/resumes",
            files={"file": ("../../My CV.pdf", b"%PDF-1.4\n%%EOF\n", "application/pdf")},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["url"].endswith("_My_CV.pdf")
        assert data["file_name"].endswith("_My_CV.pdf")
        assert "/" not in data["file_name"]
        assert data["url"].endswith("/" + data["file_name"])
        assert "/uploads/resumes/" in data["url"]
        assert data["file_size"] == len(b"%PDF-1.4\n%%EOF\n")

    def test_fake_pdf_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/resumes",
            files={"file": ("cv.pdf", b"MZ\x90\x00", "application/pdf")},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "File is not a valid PDF"}

    def test_empty_file_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/resumes",
            files={"file": ("cv.pdf", b"", "application/pdf")},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "File is empty"}

    def test_unknown_bucket(self, client, admin_headers):
        response = client.post(
            "/api/admin/uploads/secrets",
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "Unknown bucket 'secrets'"}

    def test_upload_requires_admin(self, client, user_headers):
        response = client.post(
            "/api/admin/uploads/resumes",
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=user_headers,
        )
        assert response.status_code == 403
