"""
Parcel status enumerations.
"""

import enum


class PaymentStatus(str, enum.Enum):
    """
    Payment axis of a parcel.

    UNPAID -> PAID is one-way; PAID is terminal.
    """
    UNPAID = "unpaid"
    PAID = "paid"


class DeliveryStatus(str, enum.Enum):
    """
    Delivery status enumeration.

    Status flow:
        PENDING -> RIDER_ASSIGN -> IN_TRANSIT -> DELIVERED
        RIDER_ASSIGN can fall back to PENDING when a rider is unassigned
    """
    PENDING = "pending"
    RIDER_ASSIGN = "rider_assign"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


# Legal edges, consulted only when transition enforcement is switched on
DELIVERY_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.RIDER_ASSIGN},
    DeliveryStatus.RIDER_ASSIGN: {DeliveryStatus.IN_TRANSIT, DeliveryStatus.PENDING},
    DeliveryStatus.IN_TRANSIT: {DeliveryStatus.DELIVERED},
    DeliveryStatus.DELIVERED: set(),
}

# Statuses under which a parcel counts as a rider's active assignment
ACTIVE_ASSIGNMENT_STATUSES = (DeliveryStatus.RIDER_ASSIGN, DeliveryStatus.IN_TRANSIT)


def can_transition(current: DeliveryStatus, requested: DeliveryStatus) -> bool:
    """Return True if requested is a legal next state from current."""
    return requested in DELIVERY_TRANSITIONS.get(current, set())
