"""
User and rider enumerations.

Defines the role and availability types for the delivery marketplace.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Shipper creating parcels (default role)
        RIDER: Delivery agent, granted when a rider is activated
        ADMIN: Manages riders, roles and assignments
    """
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


class RiderStatus(str, enum.Enum):
    """
    Rider application / availability status.

    New registrations start as PENDING. An admin moving a rider to ACTIVE
    promotes the matching user to the RIDER role.
    """
    PENDING = "pending"
    ACTIVE = "active"
    AVAILABLE = "available"
    ON_DELIVERY = "on_delivery"
    OFFLINE = "offline"
    UNAVAILABLE = "unavailable"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"


class RiderWorkStatus(str, enum.Enum):
    """Whether a rider is currently carrying a parcel."""
    IDLE = "idle"
    IN_DELIVERY = "in_delivery"
