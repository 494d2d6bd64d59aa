"""
Data Transfer Objects (DTOs).
Used for passing data between layers without exposing domain models.
"""
from dataclasses import dataclass, asdict
from typing import Optional, List, Any
from decimal import Decimal
from datetime import date, datetime


@dataclass
class RoomDTO:
    """Data Transfer Object for Room create/update input"""
    number: Optional[str] = None
    floor: Optional[str] = None
    capacity: Optional[int] = None
    room_type: Optional[str] = None
    status: Optional[str] = None
    monthly_rate: Optional[Decimal] = None
    description: Optional[str] = None
    amenities: Optional[List[str]] = None


@dataclass
class AssignmentRequestDTO:
    """Data Transfer Object for a tenant booking request"""
    room_id: int = None
    start_date: date = None
    end_date: date = None
    total_price: Optional[Decimal] = None
    id_image: Any = None
    notes: str = ""


@dataclass
class TransactionRowDTO:
    """One row of the printable transaction history"""
    user_id: str = ""
    student_name: str = ""
    mobile_number: str = ""
    room_number: str = ""
    room_type: str = ""
    room_price: Decimal = Decimal('0')
    status: str = ""
    approval_time: Optional[datetime] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    duration: str = ""
    checked_out_by: str = ""

    def to_dict(self):
        return asdict(self)
