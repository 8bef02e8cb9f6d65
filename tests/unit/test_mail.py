"""
Unit tests for email templates, SMTP delivery and the retrying queue.
"""

from unittest.mock import MagicMock, patch

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from baatcheet.config import MailConfig
from baatcheet.mail import (
    EmailQueue,
    MailContent,
    SMTPMailer,
    otp_verification_content,
    password_reset_content,
)


def _mail_config(**overrides) -> MailConfig:
    values = dict(
        smtp_host="smtp.x.com",
        smtp_port=587,
        smtp_user="mailer@x.com",
        smtp_password="secret",
        mail_from="",
    )
    values.update(overrides)
    return MailConfig(**values)


class TestTemplates:

    @pytest.mark.unit
    def test_verification_content(self):
        content = otp_verification_content("alice", "123456")

        assert content.subject == "OTP Verification"
        assert "Hi alice," in content.text
        assert "Your One Time Password :" in content.text
        assert "OTP: 123456" in content.text
        assert "OTP: 123456" in content.html

    @pytest.mark.unit
    def test_reset_content(self):
        content = password_reset_content("alice", "654321", "BaatCheet", "https://BaatCheet.com")

        assert content.subject == "Password Reset OTP"
        assert "OTP: 654321" in content.text
        assert "https://BaatCheet.com" in content.html

    @pytest.mark.unit
    def test_html_is_escaped(self):
        content = otp_verification_content("<b>eve</b>", "123456")

        assert "<b>eve</b>" not in content.html
        assert "&lt;b&gt;eve&lt;/b&gt;" in content.html


class TestSMTPMailer:

    @pytest.mark.unit
    def test_not_configured(self):
        mailer = SMTPMailer(_mail_config(smtp_host=""))

        assert mailer.is_configured() is False
        with pytest.raises(RuntimeError, match="SMTP not configured"):
            mailer.send("a@x.com", otp_verification_content("alice", "123456"))

    @pytest.mark.unit
    def test_sender_defaults_to_product_name(self):
        assert SMTPMailer(_mail_config()).build_message(
            "a@x.com", otp_verification_content("alice", "123456")
        )["From"] == '"BaatCheet" <mailer@x.com>'

    @pytest.mark.unit
    def test_send_with_starttls(self):
        mailer = SMTPMailer(_mail_config(mail_from="noreply@x.com"))

        with patch("baatcheet.mail.sender.smtplib.SMTP") as smtp_cls:
            conn = smtp_cls.return_value
            conn.__enter__.return_value = conn

            mailer.send("a@x.com", otp_verification_content("alice", "123456"))

        smtp_cls.assert_called_once_with("smtp.x.com", 587, timeout=15)
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with("mailer@x.com", "secret")
        from_addr, to_addrs, body = conn.sendmail.call_args[0]
        assert from_addr == "noreply@x.com"
        assert to_addrs == ["a@x.com"]
        assert "Subject: OTP Verification" in body

    @pytest.mark.unit
    def test_send_with_implicit_tls(self):
        mailer = SMTPMailer(_mail_config(smtp_port=465))

        with patch("baatcheet.mail.sender.smtplib.SMTP_SSL") as ssl_cls:
            conn = ssl_cls.return_value
            conn.__enter__.return_value = conn

            mailer.send("a@x.com", password_reset_content("alice", "123456"))

        ssl_cls.assert_called_once_with("smtp.x.com", 465, timeout=15)
        conn.starttls.assert_not_called()
        conn.sendmail.assert_called_once()


class TestEmailQueue:

    @pytest.fixture
    def mailer(self):
        return MagicMock(spec=SMTPMailer)

    @pytest.fixture
    def content(self):
        return MailContent(subject="OTP Verification", text="OTP: 123456", html="<p>OTP: 123456</p>")

    @pytest.mark.unit
    def test_enqueue_schedules_job(self, mailer, content):
        scheduler = BackgroundScheduler()
        queue = EmailQueue(mailer, scheduler=scheduler)

        job_id = queue.enqueue("a@x.com", content)

        jobs = scheduler.get_jobs()
        assert [job.id for job in jobs] == [f"{job_id}:1"]
        assert jobs[0].args == (job_id, "a@x.com", content, 1)
        mailer.send.assert_not_called()

    @pytest.mark.unit
    def test_deliver_success(self, mailer, content):
        scheduler = MagicMock()
        queue = EmailQueue(mailer, scheduler=scheduler)

        assert queue.deliver("job", "a@x.com", content, attempt=1) is True
        mailer.send.assert_called_once_with("a@x.com", content)
        scheduler.add_job.assert_not_called()

    @pytest.mark.unit
    def test_failure_is_retried_with_backoff(self, mailer, content):
        mailer.send.side_effect = OSError("connection refused")
        scheduler = MagicMock()
        queue = EmailQueue(mailer, max_attempts=2, backoff_seconds=2.0, scheduler=scheduler)

        with patch.object(queue, "_schedule") as schedule:
            assert queue.deliver("job", "a@x.com", content, attempt=1) is False

        schedule.assert_called_once_with("job", "a@x.com", content, 2, 2.0)

    @pytest.mark.unit
    def test_backoff_doubles(self, mailer, content):
        mailer.send.side_effect = OSError("connection refused")
        queue = EmailQueue(mailer, max_attempts=4, backoff_seconds=2.0, scheduler=MagicMock())

        with patch.object(queue, "_schedule") as schedule:
            queue.deliver("job", "a@x.com", content, attempt=3)

        schedule.assert_called_once_with("job", "a@x.com", content, 4, 8.0)

    @pytest.mark.unit
    def test_gives_up_after_max_attempts(self, mailer, content):
        mailer.send.side_effect = OSError("connection refused")
        scheduler = MagicMock()
        queue = EmailQueue(mailer, max_attempts=2, scheduler=scheduler)

        assert queue.deliver("job", "a@x.com", content, attempt=2) is False
        scheduler.add_job.assert_not_called()

    @pytest.mark.unit
    def test_start_and_shutdown(self, mailer):
        scheduler = MagicMock()
        scheduler.running = False
        queue = EmailQueue(mailer, scheduler=scheduler)

        queue.start()
        scheduler.start.assert_called_once()

        scheduler.running = True
        queue.shutdown()
        scheduler.shutdown.assert_called_once_with(wait=False)
