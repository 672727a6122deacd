"""Transactional email delivery."""

from amy.infrastructure.email.resend_client import EmailSendResult, ResendEmailClient


__all__ = ["EmailSendResult", "ResendEmailClient"]
