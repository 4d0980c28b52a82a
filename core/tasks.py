"""
Celery tasks for background processing.

Tasks for license key delivery.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail

from PluginLicenseService.celery import app

logger = logging.getLogger(__name__)

LICENSE_EMAIL_SUBJECT = "Your {plugin_name} license key"

LICENSE_EMAIL_BODY = """Thank you for purchasing {plugin_name}.

Your license key is:

    {license_key}

Enter this key in the plugin settings to unlock its premium features.
"""


@app.task(bind=True, max_retries=3)
def send_license_key_email_task(self, license_key: str, plugin_name: str, email: str):
    """
    Celery task for license key email delivery.

    Args:
        license_key: Generated license key
        plugin_name: Display name of the purchased plugin
        email: Buyer email address
    """
    if not email:
        logger.warning("License key email skipped: no recipient")
        return

    try:
        send_mail(
            subject=LICENSE_EMAIL_SUBJECT.format(plugin_name=plugin_name),
            message=LICENSE_EMAIL_BODY.format(plugin_name=plugin_name, license_key=license_key),
            from_email=settings.LICENSE_EMAIL_FROM,
            recipient_list=[email],
            fail_silently=False,
        )
        logger.info("License key email sent", extra={"plugin_name": plugin_name})
    except Exception as exc:
        logger.error(f"License key email failed: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
