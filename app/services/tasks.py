from celery import Celery
from app.core.config import settings

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"app.services.tasks.process_scheduled_emails": {"queue": "emails"}}
celery_app.conf.beat_schedule = {
    "process-scheduled-emails": {
        "task": "app.services.tasks.process_scheduled_emails",
        "schedule": float(settings.EMAIL_PROCESS_INTERVAL),
    },
}

@celery_app.task(bind=True, max_retries=3)
def process_scheduled_emails(self):
    import asyncio
    from app.services.tasks_internal import process_scheduled_emails_async

    try:
        return asyncio.run(process_scheduled_emails_async())
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)
