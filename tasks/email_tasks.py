from core.celery import celery_app
from core.config import settings


@celery_app.task(bind=True, max_retries=3)
def send_email_task(self, to_email: str, subject: str, body: str):
    """
    Send email asynchronously with Celery.
    Retries up to 3 times on failure.
    """
    # Imported here to avoid a circular import with services.email
    from services.email import deliver_email

    if settings.TESTING:
        return {"status": "skipped", "to": to_email}

    try:
        deliver_email(to_email, subject, body)
        return {"status": "sent", "to": to_email, "subject": subject}
    except Exception as exc:
        # Retry with exponential backoff
        countdown = min(2 ** self.request.retries, 60)  # Max 60 seconds
        raise self.retry(exc=exc, countdown=countdown)
