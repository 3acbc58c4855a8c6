"""
Input entities for the matching pipeline.

Users and trips arrive from the candidate repository as plain records.
String values for categorical fields are coerced to their enums on
construction, and ISO date strings are parsed to calendar dates.

Entities are treated as immutable snapshots: the pipeline never mutates them.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Dict, Any, List, Type, TypeVar

from ..scheduling.intervals import parse_date

E = TypeVar("E", bound=Enum)


class BudgetTier(Enum):
    """Budget tiers, in ascending order."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TravelStyle(Enum):
    """Preferred way of traveling."""
    BACKPACKING = "Backpacking"
    LUXURY = "Luxury"
    STANDARD = "Standard"
    ADVENTURE = "Adventure"


class Personality(Enum):
    """Self-reported social energy."""
    INTROVERT = "Introvert"
    EXTROVERT = "Extrovert"
    AMBIVERT = "Ambivert"


class VerificationStatus(Enum):
    """Identity verification state of a profile."""
    VERIFIED = "Verified"
    PENDING = "Pending"
    UNVERIFIED = "Unverified"


class TravelType(Enum):
    """Purpose of a trip."""
    LEISURE = "Leisure"
    BUSINESS = "Business"
    BACKPACKING = "Backpacking"
    ADVENTURE = "Adventure"


class TripStatus(Enum):
    """Lifecycle state of a trip."""
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class AccommodationPreference(Enum):
    HOSTEL = "Hostel"
    HOTEL = "Hotel"
    AIRBNB = "Airbnb"
    GUESTHOUSE = "Guesthouse"


class TransportPreference(Enum):
    PUBLIC = "Public"
    RENTAL = "Rental"
    WALKING = "Walking"
    MIXED = "Mixed"


class TripFrequency(Enum):
    RARELY = "Rarely"
    OCCASIONALLY = "Occasionally"
    FREQUENTLY = "Frequently"


def coerce_enum(enum_cls: Type[E], value: Any) -> E:
    """
    Convert a string (value or member name, any case) to an enum member.

    Raises:
        ValueError: If the value matches no member
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip()
        for member in enum_cls:
            if key.lower() in (member.value.lower(), member.name.lower()):
                return member
    raise ValueError(f"Invalid {enum_cls.__name__}: {value!r}")


def _optional_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    if value is None or value == "":
        return None
    return coerce_enum(enum_cls, value)


@dataclass
class TravelProfile:
    """
    Travel preferences used for compatibility scoring.

    Attributes:
        budget: Preferred budget tier
        travel_style: Preferred travel style
        interests: Free-form interest tags (e.g. "Food", "Hiking")
        personality: Optional personality type (neutral default when missing)
        language_preference: Optional preferred language
    """
    budget: BudgetTier
    travel_style: TravelStyle
    interests: List[str] = field(default_factory=list)
    personality: Optional[Personality] = None
    language_preference: Optional[str] = None
    dietary_restrictions: List[str] = field(default_factory=list)
    accommodation_preference: Optional[AccommodationPreference] = None
    transport_preference: Optional[TransportPreference] = None
    trip_frequency: Optional[TripFrequency] = None

    def __post_init__(self):
        """Convert string inputs to enums."""
        self.budget = coerce_enum(BudgetTier, self.budget)
        self.travel_style = coerce_enum(TravelStyle, self.travel_style)
        self.personality = _optional_enum(Personality, self.personality)
        self.accommodation_preference = _optional_enum(
            AccommodationPreference, self.accommodation_preference
        )
        self.transport_preference = _optional_enum(TransportPreference, self.transport_preference)
        self.trip_frequency = _optional_enum(TripFrequency, self.trip_frequency)
        self.interests = list(self.interests or [])
        self.dietary_restrictions = list(self.dietary_restrictions or [])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with string values."""
        return {
            "budget": self.budget.value,
            "travel_style": self.travel_style.value,
            "interests": list(self.interests),
            "personality": self.personality.value if self.personality else None,
            "language_preference": self.language_preference,
            "dietary_restrictions": list(self.dietary_restrictions),
            "accommodation_preference": (
                self.accommodation_preference.value if self.accommodation_preference else None
            ),
            "transport_preference": (
                self.transport_preference.value if self.transport_preference else None
            ),
            "trip_frequency": self.trip_frequency.value if self.trip_frequency else None,
        }


@dataclass
class UserStats:
    """Travel history counters; all default to zero for new users.

    Null counters (e.g. JSON ``null``) are read as zero.
    """
    trips_completed: int = 0
    reviews_received: int = 0
    average_rating: float = 0.0
    response_rate: float = 0.0

    def __post_init__(self):
        self.trips_completed = self.trips_completed or 0
        self.reviews_received = self.reviews_received or 0
        self.average_rating = self.average_rating or 0.0
        self.response_rate = self.response_rate or 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trips_completed": self.trips_completed,
            "reviews_received": self.reviews_received,
            "average_rating": self.average_rating,
            "response_rate": self.response_rate,
        }


@dataclass
class User:
    """
    A traveler, either the requester or a candidate.

    Attributes:
        user_id: Unique identifier
        name: Display name
        home_country: Country of residence (used for the "Nearby" tier)
        current_city: Current city (used for the "Same City" tier)
        verification_status: Identity verification state
        profile: Travel preferences
        stats: Travel history (experience bonus)
    """
    user_id: str
    name: str
    home_country: str
    current_city: str
    profile: TravelProfile
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    stats: UserStats = field(default_factory=UserStats)
    age: Optional[int] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    bio: str = ""

    def __post_init__(self):
        """Validate nested objects."""
        if isinstance(self.profile, dict):
            self.profile = TravelProfile(**self.profile)
        if isinstance(self.stats, dict):
            self.stats = UserStats(**self.stats)
        elif self.stats is None:
            self.stats = UserStats()
        self.verification_status = coerce_enum(VerificationStatus, self.verification_status)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "name": self.name,
            "home_country": self.home_country,
            "current_city": self.current_city,
            "verification_status": self.verification_status.value,
            "profile": self.profile.to_dict(),
            "stats": self.stats.to_dict(),
            "age": self.age,
            "gender": self.gender,
            "email": self.email,
            "bio": self.bio,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Create from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class Trip:
    """
    A planned trip. Dates are calendar dates, inclusive on both ends.

    Dates may be missing so that incomplete form input can be passed to
    the trip validator; the pipeline requires both.
    """
    trip_id: str
    user_id: str
    destination: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    travel_type: TravelType = TravelType.LEISURE
    budget: BudgetTier = BudgetTier.MEDIUM
    status: TripStatus = TripStatus.PLANNING
    description: Optional[str] = None

    def __post_init__(self):
        """Parse ISO dates and convert string inputs to enums."""
        if self.start_date is not None and self.start_date != "":
            self.start_date = parse_date(self.start_date)
        else:
            self.start_date = None
        if self.end_date is not None and self.end_date != "":
            self.end_date = parse_date(self.end_date)
        else:
            self.end_date = None
        self.travel_type = coerce_enum(TravelType, self.travel_type)
        self.budget = coerce_enum(BudgetTier, self.budget)
        self.status = coerce_enum(TripStatus, self.status)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with ISO dates."""
        return {
            "trip_id": self.trip_id,
            "user_id": self.user_id,
            "destination": self.destination,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "travel_type": self.travel_type.value,
            "budget": self.budget.value,
            "status": self.status.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trip":
        """Create from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
