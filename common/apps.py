from django.apps import AppConfig
import logging
import os
import sys

logger = logging.getLogger(__name__)

SKIP_COMMANDS = {'migrate', 'makemigrations', 'test', 'collectstatic', 'shell', 'cleanup_registrations'}


class CommonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'common'

    def ready(self):
        """
        Start the background scheduler in the serving process only.
        Under runserver only the reloader child (RUN_MAIN=true) runs it.
        """
        from django.conf import settings

        if not getattr(settings, 'ENABLE_BACKGROUND_SCHEDULER', False):
            return

        if len(sys.argv) > 1 and sys.argv[1] in SKIP_COMMANDS:
            return

        if 'runserver' in sys.argv and os.environ.get('RUN_MAIN') != 'true':
            return

        from .scheduler import start_scheduler
        start_scheduler()
        logger.info("Background task scheduler initialized")
