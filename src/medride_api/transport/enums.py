"""
Transport Enums

All enum types used throughout the transport core.
Values must match exactly with database constraints.
"""

from enum import Enum

# ════════════════════════════════════════════════════════════════════════════
# Participant Enums
# ════════════════════════════════════════════════════════════════════════════


class RequesterRole(str, Enum):
    """Who raised a transport request."""

    CAREGIVER = "caregiver"
    CHV = "chv"  # Community health volunteer
    HEALTH_OFFICER = "health_officer"


class ParticipantRole(str, Enum):
    """Roles that carry a trust/credit score."""

    COMMUNITY = "community"
    CAREGIVER = "caregiver"
    RIDER = "rider"
    CHV = "chv"
    HEALTH_WORKER = "health_worker"


# ════════════════════════════════════════════════════════════════════════════
# Request Enums
# ════════════════════════════════════════════════════════════════════════════


class PaymentMethod(str, Enum):
    """How a trip is paid for."""

    WALLET = "wallet"
    SHA_LOAN = "sha_loan"  # Loan-backed by the social health authority
    DIRECT = "direct"


class Urgency(str, Enum):
    """Urgency tier of a request."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ServiceType(str, Enum):
    """Purpose of the trip."""

    EMERGENCY = "emergency"
    VACCINE = "vaccine"
    MCH = "mch"  # Maternal and child health
    ROUTINE = "routine"


class RequestStatus(str, Enum):
    """Request lifecycle status."""

    PENDING = "pending"  # Waiting for a rider
    ACCEPTED = "accepted"  # Rider assigned
    IN_PROGRESS = "in_progress"  # Trip underway
    COMPLETED = "completed"  # Terminal, history recorded
    REJECTED = "rejected"  # Terminal
    CANCELLED = "cancelled"  # Terminal


TERMINAL_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.REJECTED, RequestStatus.CANCELLED})


# ════════════════════════════════════════════════════════════════════════════
# Reward Enums
# ════════════════════════════════════════════════════════════════════════════


class RewardType(str, Enum):
    """Activities that earn points."""

    RIDE_COMPLETED = "ride_completed"
    SAVINGS_ADDED = "savings_added"
    LOAN_REPAYMENT = "loan_repayment"
    SHA_CONTRIBUTION = "sha_contribution"
    EMERGENCY_REQUEST = "emergency_request"
    CHV_VISIT = "chv_visit"
    APPROVAL_ACTION = "approval_action"
    ALERT_SUBMIT = "alert_submit"
    HOUSEHOLD_VISIT = "household_visit"
    VACCINATION_GIVEN = "vaccination_given"
    PATIENT_ADDED = "patient_added"


# ════════════════════════════════════════════════════════════════════════════
# Event and Notification Enums
# ════════════════════════════════════════════════════════════════════════════


class DomainEventType(str, Enum):
    """Events appended to the outbox by the lifecycle and reward engine."""

    REQUEST_CREATED = "REQUEST_CREATED"
    REQUEST_ACCEPTED = "REQUEST_ACCEPTED"
    REQUEST_REJECTED = "REQUEST_REJECTED"
    REQUEST_STARTED = "REQUEST_STARTED"
    REQUEST_COMPLETED = "REQUEST_COMPLETED"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"
    TRANSITION_FAILED = "TRANSITION_FAILED"
    REWARD_EARNED = "REWARD_EARNED"


class NotificationSeverity(str, Enum):
    """Display severity of a notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
