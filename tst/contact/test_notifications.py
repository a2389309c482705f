"""
Tests for the admin email notification
"""
import pytest
import requests

from portfolio_api.contact import notifications
from portfolio_api.contact.notifications import build_notification_email, send_contact_notification


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@pytest.fixture
def provider_configured(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_test_key")
    monkeypatch.setenv("ADMIN_EMAIL", "owner@example.com")
    monkeypatch.delenv("CONTACT_EMAIL_FROM", raising=False)
    monkeypatch.delenv("RESEND_API_URL", raising=False)


@pytest.fixture
def captured_posts(monkeypatch):
    calls = []

    def fake_post(url, **kwargs):
        calls.append({"url": url, **kwargs})
        return FakeResponse(200, '{"id": "email_123"}')

    monkeypatch.setattr(notifications.requests, "post", fake_post)
    return calls


class TestBuildNotificationEmail:

    def test_html_special_characters_are_escaped(self):
        content = build_notification_email(
            name="<script>alert('x')</script>",
            email="a&b@example.com",
            message='He said "hi" & <b>left</b>',
        )

        assert "<script>" not in content["html"]
        assert "<b>left</b>" not in content["html"]
        assert "&lt;script&gt;" in content["html"]
        assert "a&amp;b@example.com" in content["html"]
        assert "&quot;hi&quot;" in content["html"]
        assert "<script>" not in content["subject"]

    def test_single_quotes_are_escaped(self):
        content = build_notification_email("O'Brien", "ob@example.com", "it's fine")
        assert "O'Brien" not in content["html"]
        assert "it's" not in content["html"]

    def test_subject_names_sender(self):
        content = build_notification_email("Ada", "ada@example.com", "Hi")
        assert content["subject"] == "New Contact Message from Ada"


class TestSendContactNotification:

    def test_disabled_without_configuration(self, monkeypatch, captured_posts):
        monkeypatch.delenv("RESEND_API_KEY", raising=False)
        monkeypatch.setenv("ADMIN_EMAIL", "owner@example.com")

        assert send_contact_notification("Ada", "ada@example.com", "Hi") is False
        assert captured_posts == []

    def test_disabled_without_admin_email(self, monkeypatch, captured_posts):
        monkeypatch.setenv("RESEND_API_KEY", "re_test_key")
        monkeypatch.delenv("ADMIN_EMAIL", raising=False)

        assert send_contact_notification("Ada", "ada@example.com", "Hi") is False
        assert captured_posts == []

    def test_sends_escaped_email_to_admin(self, provider_configured, captured_posts):
        assert send_contact_notification("<i>Ada</i>", "ada@example.com", "Hi <there>") is True

        assert len(captured_posts) == 1
        call = captured_posts[0]
        assert call["url"] == "https://api.resend.com/emails"
        assert call["headers"]["Authorization"] == "Bearer re_test_key"
        assert call["timeout"] == notifications.REQUEST_TIMEOUT_SECONDS
        payload = call["json"]
        assert payload["to"] == ["owner@example.com"]
        assert payload["from"] == "Portfolio Contact <onboarding@resend.dev>"
        assert "<i>" not in payload["html"]
        assert "Hi &lt;there&gt;" in payload["html"]

    def test_network_failure_is_swallowed(self, provider_configured, monkeypatch):
        def unreachable(url, **kwargs):
            raise requests.ConnectionError("connection refused")

        monkeypatch.setattr(notifications.requests, "post", unreachable)

        assert send_contact_notification("Ada", "ada@example.com", "Hi") is False

    def test_provider_rejection_is_swallowed(self, provider_configured, monkeypatch):
        monkeypatch.setattr(
            notifications.requests, "post",
            lambda url, **kwargs: FakeResponse(422, '{"message": "invalid from"}'),
        )

        assert send_contact_notification("Ada", "ada@example.com", "Hi") is False
