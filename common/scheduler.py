"""
Background task scheduler.
Uses APScheduler to run periodic housekeeping without requiring external services.
"""
import logging
import atexit
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def cleanup_registrations_job():
    """
    Delete temporary registrations whose verification code expired.
    Idempotent, safe to run while requests are being served.
    """
    from users.services import UserService

    try:
        deleted = UserService().cleanup_expired_registrations()
        if deleted:
            logger.info(f"Cleaned up {deleted} expired registrations")
    except Exception as e:
        logger.error(f"Error cleaning up expired registrations: {str(e)}", exc_info=True)


def start_scheduler():
    """
    Initialize and start the background scheduler.
    This should be called once when Django starts.
    """
    global scheduler

    if scheduler is not None and scheduler.running:
        logger.warning("Scheduler is already running")
        return

    try:
        scheduler = BackgroundScheduler(timezone=timezone.get_current_timezone())
        minutes = getattr(settings, 'DORM_CLEANUP_INTERVAL_MINUTES', 2)

        scheduler.add_job(
            cleanup_registrations_job,
            trigger=IntervalTrigger(minutes=minutes),
            id='cleanup_expired_registrations',
            name='Clean Up Expired Registrations',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )

        scheduler.start()
        logger.info(f"Background scheduler started, registration cleanup every {minutes} minutes")

        atexit.register(stop_scheduler)

    except Exception as e:
        logger.error(f"Failed to start scheduler: {str(e)}", exc_info=True)
        scheduler = None


def stop_scheduler():
    """
    Stop the background scheduler.
    Should be called when Django shuts down.
    """
    global scheduler

    if scheduler is not None and scheduler.running:
        try:
            scheduler.shutdown(wait=False)
            logger.info("Background scheduler stopped")
        except Exception as e:
            logger.error(f"Error stopping scheduler: {str(e)}", exc_info=True)
        finally:
            scheduler = None
