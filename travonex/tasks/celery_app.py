from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

from celery import Celery
from celery.schedules import crontab
from celery.signals import after_setup_logger
from travonex.core.config import settings


def _redis_url_for_celery(url: str) -> str:
    """Celery requires ssl_cert_reqs for rediss:// brokers."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        return urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))
    return url


_redis_url = _redis_url_for_celery(settings.REDIS_URL)

celery = Celery(
    "travonex",
    broker=_redis_url,
    backend=_redis_url,
    include=["travonex.tasks.jobs"],
)

celery.conf.timezone = settings.WORKER_TIMEZONE


@after_setup_logger.connect
def on_setup_logger(logger, **kwargs):
    from travonex.core.logging import setup_logging
    setup_logging()


celery.conf.beat_schedule = {
    "complete-finished-bookings-hourly": {
        "task": "travonex.tasks.jobs.complete_bookings",
        "schedule": 3600.0,
    },
    "verify-credit-ledgers-nightly": {
        "task": "travonex.tasks.jobs.verify_ledgers",
        "schedule": crontab(hour=2, minute=30),
    },
}
