from dataclasses import dataclass
from enum import Enum


class MaintenancePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MaintenanceCategory(str, Enum):
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    STRUCTURAL = "structural"
    APPLIANCE = "appliance"
    HVAC = "hvac"
    PEST_CONTROL = "pest_control"
    CLEANING = "cleaning"
    OTHER = "other"


class MaintenanceStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    CANCELLED = "cancelled"


_TRANSITIONS = {
    MaintenanceStatus.OPEN: {
        MaintenanceStatus.IN_PROGRESS,
        MaintenanceStatus.RESOLVED,
        MaintenanceStatus.CANCELLED,
    },
    MaintenanceStatus.IN_PROGRESS: {
        MaintenanceStatus.OPEN,
        MaintenanceStatus.RESOLVED,
        MaintenanceStatus.CANCELLED,
    },
    # Reopening a resolved request sends it back to work.
    MaintenanceStatus.RESOLVED: {MaintenanceStatus.CLOSED, MaintenanceStatus.IN_PROGRESS},
    MaintenanceStatus.CLOSED: set(),
    MaintenanceStatus.CANCELLED: set(),
}


@dataclass(frozen=True)
class MaintenanceWorkflow:
    """Status moves a maintenance request may make.

    closed and cancelled are final. A request is resolved once work is done
    and closed after the resolution is confirmed.
    """

    current: MaintenanceStatus

    @property
    def is_final(self) -> bool:
        return not _TRANSITIONS[self.current]

    def allows(self, target: MaintenanceStatus) -> bool:
        return target in _TRANSITIONS[self.current]
