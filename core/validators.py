"""
Validation utilities and validators.
Centralized validation logic following single responsibility principle.
"""
import re
from typing import Optional

from django.conf import settings

from core.constants import DefaultLimits
from core.exceptions import ValidationError as AppValidationError

ROOM_NUMBER_RE = re.compile(r'^[A-Z0-9-]+$')
FLOOR_RE = re.compile(r'^[0-9]+$')


class RoomValidator:
    """Validates room attributes"""

    @staticmethod
    def normalize_number(number: str) -> str:
        """Uppercase and validate a room number"""
        value = (number or '').strip().upper()
        if not value or not ROOM_NUMBER_RE.match(value):
            raise AppValidationError(
                message="Room number can only contain letters, numbers, and hyphens",
                code="INVALID_ROOM_NUMBER",
                details={"number": number}
            )
        return value

    @staticmethod
    def validate_floor(floor: str) -> str:
        value = str(floor or '').strip()
        if not FLOOR_RE.match(value):
            raise AppValidationError(
                message="Floor must be a number",
                code="INVALID_FLOOR",
                details={"floor": floor}
            )
        return value

    @staticmethod
    def validate_capacity(capacity: int, occupied: int = 0):
        """Validate capacity bounds and that it still fits current occupants"""
        if capacity < DefaultLimits.MIN_ROOM_CAPACITY or capacity > DefaultLimits.MAX_ROOM_CAPACITY:
            raise AppValidationError(
                message=f"Room capacity must be between {DefaultLimits.MIN_ROOM_CAPACITY} "
                        f"and {DefaultLimits.MAX_ROOM_CAPACITY}",
                code="INVALID_CAPACITY",
                details={"capacity": capacity}
            )
        if capacity < occupied:
            raise AppValidationError(
                message="Capacity cannot be lower than the current number of occupants",
                code="CAPACITY_BELOW_OCCUPANCY",
                details={"capacity": capacity, "occupied": occupied}
            )


class AssignmentValidator:
    """Validates booking input"""

    @staticmethod
    def validate_dates(start_date, end_date):
        if start_date is None or end_date is None:
            raise AppValidationError(
                message="Start date and end date are required",
                code="MISSING_DATES"
            )
        if end_date < start_date:
            raise AppValidationError(
                message="End date cannot be before start date",
                code="INVALID_END_DATE",
                details={"start_date": str(start_date), "end_date": str(end_date)}
            )


class PasswordValidator:
    """Validates password rules"""

    @staticmethod
    def validate_password(password: Optional[str]):
        if not password or len(password) < DefaultLimits.MIN_PASSWORD_LENGTH:
            raise AppValidationError(
                message=f"Password must be at least {DefaultLimits.MIN_PASSWORD_LENGTH} characters long",
                code="PASSWORD_TOO_SHORT"
            )


class UploadValidator:
    """Validates uploaded images before they are stored"""

    @staticmethod
    def validate_image(upload, field: str = 'file'):
        if upload is None:
            return
        content_type = getattr(upload, 'content_type', '') or ''
        if not content_type.startswith('image/'):
            raise AppValidationError(
                message="Only image files are allowed",
                code="INVALID_FILE_TYPE",
                details={"field": field, "content_type": content_type}
            )
        limit = getattr(settings, 'DORM_UPLOAD_MAX_BYTES', DefaultLimits.UPLOAD_MAX_BYTES)
        if upload.size > limit:
            raise AppValidationError(
                message="File is too large. Maximum size is 5MB",
                code="FILE_TOO_LARGE",
                details={"field": field, "size": upload.size}
            )

    @staticmethod
    def validate_image_count(count: int):
        if count > DefaultLimits.MAX_ROOM_IMAGES:
            raise AppValidationError(
                message=f"A room can have at most {DefaultLimits.MAX_ROOM_IMAGES} images",
                code="TOO_MANY_IMAGES",
                details={"count": count}
            )
