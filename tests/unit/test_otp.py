"""
Unit tests for OTP tickets and the rate limiter.
"""

from unittest.mock import patch

import pytest

from baatcheet.auth import OTPIssuer, StagedRegistration, ResetTicket, RateLimiter, generate_otp


class TestGenerateOtp:

    @pytest.mark.unit
    def test_six_digits(self):
        for _ in range(200):
            otp = generate_otp()
            assert len(otp) == 6
            assert otp.isdigit()
            assert 100000 <= int(otp) <= 999999

    @pytest.mark.unit
    def test_bounds(self):
        with patch("baatcheet.auth.otp.secrets.randbelow", return_value=0):
            assert generate_otp() == "100000"
        with patch("baatcheet.auth.otp.secrets.randbelow", return_value=899999):
            assert generate_otp() == "999999"


class TestTickets:

    @pytest.mark.unit
    def test_staged_registration_from_dict(self):
        staged = StagedRegistration.from_dict({
            "username": "alice",
            "email": "a@x.com",
            "password": "Abc123!",
            "otp": "123456",
        })

        assert staged.username == "alice"
        assert staged.to_dict()["otp"] == "123456"

    @pytest.mark.unit
    def test_missing_field_rejected(self):
        with pytest.raises(ValueError, match="password"):
            StagedRegistration.from_dict({"username": "alice", "email": "a@x.com", "otp": "123456"})

    @pytest.mark.unit
    def test_non_string_otp_rejected(self):
        with pytest.raises(ValueError):
            ResetTicket.from_dict({"otp": 123456})


class TestOTPIssuer:

    @pytest.fixture
    def issuer(self, store):
        return OTPIssuer(store, ttl_seconds=300)

    @pytest.mark.unit
    def test_issue_and_load(self, issuer, store):
        issuer.issue("reset:a@x.com", ResetTicket(otp="123456"))

        ticket = issuer.load("reset:a@x.com", ResetTicket)
        assert ticket == ResetTicket(otp="123456")
        assert 0 < store.ttl("reset:a@x.com") <= 300

    @pytest.mark.unit
    def test_reissue_replaces(self, issuer):
        issuer.issue("reset:a@x.com", ResetTicket(otp="111111"))
        issuer.issue("reset:a@x.com", ResetTicket(otp="222222"))

        assert issuer.load("reset:a@x.com", ResetTicket).otp == "222222"

    @pytest.mark.unit
    def test_load_missing(self, issuer):
        assert issuer.load("reset:a@x.com", ResetTicket) is None

    @pytest.mark.unit
    def test_malformed_ticket_is_discarded(self, issuer, store):
        store.set("register:a@x.com", "{broken", 300)

        assert issuer.load("register:a@x.com", StagedRegistration) is None
        assert store.exists("register:a@x.com") is False

    @pytest.mark.unit
    def test_wrong_shape_is_discarded(self, issuer, store):
        store.set_json("register:a@x.com", {"otp": "123456"}, 300)

        assert issuer.load("register:a@x.com", StagedRegistration) is None
        assert store.exists("register:a@x.com") is False

    @pytest.mark.unit
    def test_matches_is_exact(self):
        ticket = ResetTicket(otp="123456")

        assert OTPIssuer.matches(ticket, "123456") is True
        assert OTPIssuer.matches(ticket, " 123456 ") is False
        assert OTPIssuer.matches(ticket, "12345") is False
        assert OTPIssuer.matches(ticket, "0123456") is False
        assert OTPIssuer.matches(ticket, None) is False

    @pytest.mark.unit
    def test_discard(self, issuer, store):
        issuer.issue("reset:a@x.com", ResetTicket(otp="123456"))
        issuer.discard("reset:a@x.com")

        assert store.exists("reset:a@x.com") is False


class TestRateLimiter:

    @pytest.fixture
    def limiter(self, store):
        return RateLimiter(store, window_seconds=60)

    @pytest.mark.unit
    def test_allows_until_armed(self, limiter, store):
        key = "register:ratelimit:a@x.com"
        assert limiter.allow(key) is True

        limiter.arm(key)
        assert limiter.allow(key) is False
        assert store.get(key) == "true"
        assert 0 < store.ttl(key) <= 60

    @pytest.mark.unit
    def test_clear(self, limiter):
        key = "reset:rateLimit:a@x.com"
        limiter.arm(key)
        limiter.clear(key)

        assert limiter.allow(key) is True

    @pytest.mark.unit
    def test_keys_are_independent(self, limiter):
        limiter.arm("register:ratelimit:a@x.com")

        assert limiter.allow("reset:rateLimit:a@x.com") is True
        assert limiter.allow("register:ratelimit:b@x.com") is True
