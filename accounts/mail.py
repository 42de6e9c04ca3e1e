"""
Welcome email with the generated credentials of a newly created user.

Delivery is fire-and-forget: ``WelcomeNotifier.dispatch`` hands the send to
a background executor and returns immediately. Failures are logged in the
worker and never reach the request that created the user.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from email.utils import formataddr

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string


logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=settings.MAIL_WORKERS, thread_name_prefix="welcome-mail")


def build_welcome_message(full_name, email, password, role, company_name):
    context = {
        "full_name": full_name,
        "email": email,
        "password": password,
        "role_title": role.label if hasattr(role, "label") else str(role).title(),
        "company_name": company_name,
        "login_url": settings.FRONTEND_URL,
    }

    message = EmailMultiAlternatives(
        subject=f"Welcome to {company_name} - Your Account Details",
        body=render_to_string("accounts/welcome_email.txt", context),
        from_email=formataddr((company_name, settings.DEFAULT_FROM_EMAIL)),
        to=[email],
    )
    message.attach_alternative(render_to_string("accounts/welcome_email.html", context), "text/html")
    return message


def send_welcome_email(full_name, email, password, role, company_name):
    """Send synchronously. Returns True on success; failures are logged, not raised."""
    try:
        build_welcome_message(full_name, email, password, role, company_name).send()
    except Exception:
        logger.exception("Failed to send welcome email to %s", email)
        return False

    logger.info("Welcome email sent to %s", email)
    return True


class WelcomeNotifier:

    def __init__(self, executor=None):
        self.executor = executor or _executor

    def dispatch(self, **message):
        """Queue the welcome email. The returned future is never awaited by callers."""
        try:
            return self.executor.submit(send_welcome_email, **message)
        except RuntimeError:
            # executor shut down (process exiting)
            logger.exception("Could not queue welcome email to %s", message.get("email"))
            return None
