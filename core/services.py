"""
Base service classes.
Services contain business logic and orchestrate between repositories.
"""
import logging

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base service class providing common functionality.
    Services should contain business logic and use repositories for data access.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def log_info(self, message: str, **context):
        """Log info message with context"""
        self.logger.info(f"{message} | Context: {context}")

    def log_warning(self, message: str, **context):
        self.logger.warning(f"{message} | Context: {context}")

