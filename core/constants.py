"""
Application-wide constants.
Centralized constants following DRY principle.
"""

# User Roles
class UserRole:
    ADMIN = 'admin'
    TENANT = 'tenant'

    CHOICES = [
        (ADMIN, 'Admin'),
        (TENANT, 'Tenant'),
    ]


# Account approval
class ApprovalStatus:
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]


# Room Types
class RoomType:
    STANDARD = 'Standard'
    SINGLE = 'Single'
    DOUBLE = 'Double'
    SUITE = 'Suite'

    CHOICES = [
        (STANDARD, 'Standard'),
        (SINGLE, 'Single'),
        (DOUBLE, 'Double'),
        (SUITE, 'Suite'),
    ]


# Room Status
class RoomStatus:
    AVAILABLE = 'available'
    OCCUPIED = 'occupied'
    MAINTENANCE = 'maintenance'

    CHOICES = [
        (AVAILABLE, 'Available'),
        (OCCUPIED, 'Occupied'),
        (MAINTENANCE, 'Maintenance'),
    ]


# Room Assignment Status
class AssignmentStatus:
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
        (ACTIVE, 'Active'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    # A tenant may hold at most one of these at a time
    OPEN = frozenset({PENDING, APPROVED, ACTIVE})
    # Statuses that hold a slot in the room
    OCCUPYING = frozenset({APPROVED, ACTIVE})
    TERMINAL = frozenset({COMPLETED, REJECTED, CANCELLED})
    # Statuses that count towards income
    BILLABLE = frozenset({APPROVED, ACTIVE, COMPLETED})


# Payment
class PaymentMethod:
    GCASH = 'gcash'
    CASH = 'cash'

    CHOICES = [
        (GCASH, 'GCash'),
        (CASH, 'Cash'),
    ]


class PaymentStatus:
    PENDING = 'pending'
    VERIFIED = 'verified'
    REJECTED = 'rejected'

    CHOICES = [
        (PENDING, 'Pending'),
        (VERIFIED, 'Verified'),
        (REJECTED, 'Rejected'),
    ]


# Maintenance
class MaintenancePriority:
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'

    CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
        (URGENT, 'Urgent'),
    ]


class MaintenanceStatus:
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    REJECTED = 'rejected'

    CHOICES = [
        (PENDING, 'Pending'),
        (IN_PROGRESS, 'In Progress'),
        (COMPLETED, 'Completed'),
        (REJECTED, 'Rejected'),
    ]


# Reports
class ReportCategory:
    MAINTENANCE = 'maintenance'
    COMPLAINT = 'complaint'
    OTHER = 'other'

    CHOICES = [
        (MAINTENANCE, 'Maintenance'),
        (COMPLAINT, 'Complaint'),
        (OTHER, 'Other'),
    ]


class ReportStatus:
    PENDING = 'pending'
    IN_REVIEW = 'in-review'
    RESOLVED = 'resolved'

    CHOICES = [
        (PENDING, 'Pending'),
        (IN_REVIEW, 'In Review'),
        (RESOLVED, 'Resolved'),
    ]


# Default Limits
class DefaultLimits:
    MIN_ROOM_CAPACITY = 1
    MAX_ROOM_CAPACITY = 6
    DEFAULT_MONTHLY_RATE = 5000
    DAYS_PER_MONTH = 30
    MAX_ROOM_IMAGES = 5
    UPLOAD_MAX_BYTES = 5 * 1024 * 1024
    CHECKOUT_GRACE_HOURS = 24
    VERIFICATION_CODE_TTL_MINUTES = 5
    MIN_PASSWORD_LENGTH = 6
    REFERENCE_RETRIES = 10
