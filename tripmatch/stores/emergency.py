"""
In-memory emergency alert store.

Alert lifecycle is monotonic: Active -> Acknowledged -> Resolved. An alert can
be resolved straight from Active, but never moves backwards.

Notifying emergency services, emergency contacts and nearby travelers is
simulated with log records; no message leaves the process.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional

from ..schema.entities import coerce_enum
from .base import InMemoryStore, Clock

logger = logging.getLogger(__name__)


class AlertType(Enum):
    SOS = "SOS"
    MEDICAL = "Medical"
    LOST = "Lost"
    THEFT = "Theft"
    OTHER = "Other"


class AlertSeverity(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class AlertStatus(Enum):
    ACTIVE = "Active"
    ACKNOWLEDGED = "Acknowledged"
    RESOLVED = "Resolved"


SEVERITY_BY_TYPE = {
    AlertType.SOS: AlertSeverity.CRITICAL,
    AlertType.MEDICAL: AlertSeverity.HIGH,
    AlertType.LOST: AlertSeverity.MEDIUM,
    AlertType.THEFT: AlertSeverity.MEDIUM,
    AlertType.OTHER: AlertSeverity.LOW,
}

MESSAGE_TEMPLATES = {
    AlertType.SOS: "EMERGENCY: I need immediate help!",
    AlertType.MEDICAL: "Medical emergency: I need medical assistance",
    AlertType.LOST: "I am lost and need help finding my way",
    AlertType.THEFT: "I have been robbed and need assistance",
    AlertType.OTHER: "I need help with an urgent situation",
}

INSTRUCTIONS = {
    AlertType.SOS: [
        "Stay calm and try to move to a safe location",
        "Call emergency services if possible",
        "Share your location with trusted contacts",
        "Follow any instructions from emergency responders",
    ],
    AlertType.MEDICAL: [
        "Call emergency medical services immediately",
        "Provide your location and nature of medical emergency",
        "Follow medical guidance if available",
        "Keep emergency contacts informed",
    ],
    AlertType.LOST: [
        "Stay in one location if safe",
        "Share your GPS coordinates",
        "Look for landmarks to help identify your location",
        "Contact local authorities if needed",
    ],
    AlertType.THEFT: [
        "Move to a safe location immediately",
        "Report the theft to local police",
        "Contact your bank to cancel cards if stolen",
        "Document what was stolen for insurance",
    ],
    AlertType.OTHER: [
        "Assess the situation for immediate dangers",
        "Contact appropriate authorities or services",
        "Keep trusted contacts informed",
        "Follow safety protocols for your specific situation",
    ],
}


@dataclass
class AlertLocation:
    latitude: float
    longitude: float
    address: str = ""

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be in [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be in [-180, 180], got {self.longitude}")
        if not self.address:
            self.address = f"Lat: {self.latitude:.6f}, Lng: {self.longitude:.6f}"

    def to_dict(self) -> Dict[str, Any]:
        return {"latitude": self.latitude, "longitude": self.longitude, "address": self.address}


@dataclass
class EmergencyAlert:
    """
    One emergency raised by a traveler.

    Attributes:
        severity: Derived from alert_type, never set by the caller
        responders: Users who acknowledged the alert, in response order
    """
    alert_id: str
    user_id: str
    alert_type: AlertType
    location: AlertLocation
    message: str
    severity: AlertSeverity
    created_at: datetime
    status: AlertStatus = AlertStatus.ACTIVE
    trip_id: Optional[str] = None
    group_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    responders: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "user_id": self.user_id,
            "alert_type": self.alert_type.value,
            "location": self.location.to_dict(),
            "message": self.message,
            "severity": self.severity.value,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "trip_id": self.trip_id,
            "group_id": self.group_id,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "responders": list(self.responders),
        }


def determine_severity(alert_type: AlertType) -> AlertSeverity:
    return SEVERITY_BY_TYPE[coerce_enum(AlertType, alert_type)]


def default_message(alert_type: AlertType) -> str:
    """Pre-filled alert text for a type."""
    return MESSAGE_TEMPLATES[coerce_enum(AlertType, alert_type)]


def instructions(alert_type: AlertType) -> List[str]:
    """Safety steps shown to the traveler for a type."""
    return list(INSTRUCTIONS[coerce_enum(AlertType, alert_type)])


class EmergencyAlertStore(InMemoryStore):
    """Owns emergency alerts and enforces their status transitions."""

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._alerts: Dict[str, EmergencyAlert] = {}

    def trigger_alert(
        self,
        user_id: str,
        alert_type: AlertType,
        location: Any,
        message: Optional[str] = None,
        trip_id: Optional[str] = None,
        group_id: Optional[str] = None
    ) -> EmergencyAlert:
        """
        Raise an alert and simulate notifications.

        Args:
            alert_type: AlertType or its string value
            location: AlertLocation or a mapping with latitude/longitude/address
            message: Alert text (type template if None or blank)

        Returns:
            The new Active alert
        """
        alert_type = coerce_enum(AlertType, alert_type)
        if isinstance(location, dict):
            location = AlertLocation(**location)

        alert = EmergencyAlert(
            alert_id=self._next_id("alert"),
            user_id=user_id,
            alert_type=alert_type,
            location=location,
            message=message.strip() if message and message.strip() else default_message(alert_type),
            severity=determine_severity(alert_type),
            created_at=self.clock(),
            trip_id=trip_id,
            group_id=group_id,
        )
        self._alerts[alert.alert_id] = alert
        self._notify(alert)
        return alert

    def _notify(self, alert: EmergencyAlert) -> None:
        logger.warning(
            f"EMERGENCY ALERT {alert.alert_id} [{alert.severity.value}] "
            f"{alert.alert_type.value}: {alert.message} at {alert.location.address}"
        )
        logger.info(f"Notifying emergency services for alert {alert.alert_id}")
        logger.info(f"Notifying emergency contacts of user {alert.user_id}")
        logger.info(f"Notifying nearby travelers about {alert.alert_type.value} alert")

    def _require_alert(self, alert_id: str) -> EmergencyAlert:
        if alert_id not in self._alerts:
            raise KeyError(f"Alert not found: {alert_id}")
        return self._alerts[alert_id]

    def acknowledge(self, alert_id: str, responder_id: str) -> EmergencyAlert:
        """
        Register a responder. The first acknowledgement moves Active to
        Acknowledged; later ones only add the responder.

        Raises:
            KeyError: If the alert does not exist
            ValueError: If the alert is already resolved
        """
        alert = self._require_alert(alert_id)
        if alert.status == AlertStatus.RESOLVED:
            raise ValueError(f"Alert {alert_id} is already resolved")
        if responder_id not in alert.responders:
            alert.responders.append(responder_id)
        if alert.status == AlertStatus.ACTIVE:
            alert.status = AlertStatus.ACKNOWLEDGED
            logger.info(f"Alert {alert_id} acknowledged by {responder_id}")
        return alert

    def resolve(self, alert_id: str, responder_id: Optional[str] = None) -> EmergencyAlert:
        """
        Close an alert.

        Raises:
            KeyError: If the alert does not exist
            ValueError: If the alert is already resolved
        """
        alert = self._require_alert(alert_id)
        if alert.status == AlertStatus.RESOLVED:
            raise ValueError(f"Alert {alert_id} is already resolved")
        if responder_id is not None and responder_id not in alert.responders:
            alert.responders.append(responder_id)
        alert.status = AlertStatus.RESOLVED
        alert.resolved_at = self.clock()
        logger.info(f"Alert {alert_id} resolved")
        return alert

    def update_location(self, alert_id: str, location: Any) -> EmergencyAlert:
        """Move an open alert to a new location."""
        alert = self._require_alert(alert_id)
        if alert.status == AlertStatus.RESOLVED:
            raise ValueError(f"Alert {alert_id} is already resolved")
        alert.location = AlertLocation(**location) if isinstance(location, dict) else location
        logger.info(f"Location updated for alert {alert_id}: {alert.location.address}")
        return alert

    def get_active_alerts(self) -> List[EmergencyAlert]:
        """Alerts not yet resolved, oldest first."""
        return [a for a in self._alerts.values() if a.status != AlertStatus.RESOLVED]

    def get_user_alerts(self, user_id: str) -> List[EmergencyAlert]:
        return [a for a in self._alerts.values() if a.user_id == user_id]

    def get_alert(self, alert_id: str) -> Optional[EmergencyAlert]:
        return self._alerts.get(alert_id)
