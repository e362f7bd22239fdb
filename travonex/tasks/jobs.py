from travonex.tasks.celery_app import celery
from travonex.tasks import worker_jobs

@celery.task(name="travonex.tasks.jobs.complete_bookings")
def complete_bookings():
    return worker_jobs.complete_bookings()

@celery.task(name="travonex.tasks.jobs.verify_ledgers")
def verify_ledgers():
    return worker_jobs.verify_ledgers()
