from celery import Celery
from pastebin.config import settings


celery_app = Celery(
    "pastebin",
    broker=settings.CELERY_BROKER_URL,
    include=[
        "pastebin.tasks.sweep",
        ]
)


celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    enable_utc=True,
    beat_schedule={
        "sweep-expired-pastes": {
            "task": "pastebin.tasks.sweep.sweep_expired_pastes",
            "schedule": float(settings.SWEEP_INTERVAL_SECONDS),
        },
    },
)
