"""
Unit tests for PasswordResetService.
"""

import pytest

from baatcheet.services import AuthErrorCode


class TestRequestReset:

    @pytest.mark.unit
    def test_issues_ticket_and_email(self, password_reset_service, sample_account, store, mail_queue):
        result = password_reset_service.request_reset("A@x.com")

        assert result.success is True
        assert result.message == "A password reset OTP has been sent to your email. Verify it within 5 minutes."
        ticket = store.get_json("reset:a@x.com")
        assert len(ticket["otp"]) == 6
        assert 0 < store.ttl("reset:a@x.com") <= 300
        assert store.get("reset:rateLimit:a@x.com") == "true"

        email, content = mail_queue.enqueue.call_args[0]
        assert email == "a@x.com"
        assert content.subject == "Password Reset OTP"
        assert "Hi alice," in content.text
        assert f"OTP: {ticket['otp']}" in content.text

    @pytest.mark.unit
    def test_unknown_email(self, password_reset_service, store, mail_queue):
        result = password_reset_service.request_reset("nobody@x.com")

        assert result.code == AuthErrorCode.NOT_FOUND
        assert result.error == "User not found"
        assert store.exists("reset:nobody@x.com") is False
        mail_queue.enqueue.assert_not_called()

    @pytest.mark.unit
    def test_rate_limited(self, password_reset_service, sample_account, store):
        password_reset_service.request_reset("a@x.com")
        first = store.get_json("reset:a@x.com")["otp"]

        result = password_reset_service.request_reset("a@x.com")

        assert result.code == AuthErrorCode.RATE_LIMITED
        assert store.get_json("reset:a@x.com")["otp"] == first

    @pytest.mark.unit
    def test_independent_of_registration_limit(self, password_reset_service, sample_account, store):
        store.set("register:ratelimit:a@x.com", "true", 60)

        assert password_reset_service.request_reset("a@x.com").success is True


class TestVerifyReset:

    @pytest.mark.unit
    def test_resets_password(self, password_reset_service, sample_account, store, account_store):
        password_reset_service.request_reset("a@x.com")
        otp = store.get_json("reset:a@x.com")["otp"]

        result = password_reset_service.verify_reset("a@x.com", otp, "Xyz789#")

        assert result.success is True
        assert result.message == "Password has been reset successfully. Please login again."
        assert result.tokens is None
        assert account_store.verify_password("a@x.com", "Xyz789#") is not None
        assert account_store.verify_password("a@x.com", "Abc123!") is None
        assert store.exists("reset:a@x.com") is False
        assert store.exists("reset:rateLimit:a@x.com") is False

    @pytest.mark.unit
    def test_wrong_otp_keeps_password(self, password_reset_service, sample_account, store, account_store):
        password_reset_service.request_reset("a@x.com")

        result = password_reset_service.verify_reset("a@x.com", "000000", "Xyz789#")

        assert result.code == AuthErrorCode.INVALID_OTP
        assert account_store.verify_password("a@x.com", "Abc123!") is not None
        assert store.exists("reset:a@x.com") is True

    @pytest.mark.unit
    def test_no_ticket(self, password_reset_service, sample_account):
        result = password_reset_service.verify_reset("a@x.com", "123456", "Xyz789#")

        assert result.code == AuthErrorCode.EXPIRED
        assert result.error == "OTP Expired or Invalid"

    @pytest.mark.unit
    def test_account_removed_meanwhile(self, password_reset_service, store):
        store.set_json("reset:gone@x.com", {"otp": "123456"}, 300)

        result = password_reset_service.verify_reset("gone@x.com", "123456", "Xyz789#")

        assert result.code == AuthErrorCode.NOT_FOUND
        assert store.exists("reset:gone@x.com") is False
