"""
Standardized exception hierarchy for trajectory
Provides rich context, consistent logging, and caller-friendly error messages

Two failure kinds leave the core:
- ValidationError: bad input, rejected before any state change (retryable with corrected input)
- ConflictError: anti-cheat rule hit for an (entity, date) pair (not retryable for that date)
"""

from datetime import date, datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class TrajectoryError(Exception):
    """
    Base exception for all trajectory errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - Caller-facing messages
    - Structured context
    - Automatic logging

    Example:
        raise TrajectoryError(
            message="Failed to apply transaction",
            user_id="123456",
            operation="check_habit",
            context={"habit": "Run"}
        )
    """

    retryable: bool = False
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for callers"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class ValidationError(TrajectoryError):
    """
    Raised when caller input fails validation

    Examples:
    - Missing habit or date
    - Negative requested XP
    - Blank note text

    Example:
        raise ValidationError(
            message="Requested XP cannot be negative",
            field="requested_xp",
            value=-5
        )
    """

    retryable = True
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        kwargs.setdefault("user_message", f"Invalid {field}: {message}" if field else message)
        kwargs.setdefault("context", {"field": field, "value": value})
        super().__init__(message=message, **kwargs)


class RecordNotFoundError(ValidationError):
    """Referenced record (e.g. a goal) is not registered"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            field=record_type,
            value=record_id,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Business-Rule Conflicts (Anti-cheat)
# ==========================================

class ConflictError(TrajectoryError):
    """
    Base class for anti-cheat conflicts

    Terminal for the (entity, date) pair; the same call on another date succeeds.
    """

    retryable = False
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        on_date: Optional[date] = None,
        **kwargs
    ):
        self.entity = entity
        self.on_date = on_date
        kwargs.setdefault("context", {
            "entity": entity,
            "date": on_date.isoformat() if on_date else None,
        })
        super().__init__(message=message, **kwargs)


class DuplicateRewardError(ConflictError):
    """Habit already checked DONE on this date"""

    def __init__(self, habit_name: str, on_date: date, **kwargs):
        super().__init__(
            message=(
                f"Habit '{habit_name}' has already been checked as DONE on "
                f"{on_date.isoformat()}. Cannot reward twice."
            ),
            entity=habit_name,
            on_date=on_date,
            user_message=f"'{habit_name}' is already done for today.",
            **kwargs
        )


class DuplicateNoteError(ConflictError):
    """Goal already has a note on this date"""

    def __init__(self, goal_title: str, on_date: date, **kwargs):
        super().__init__(
            message=(
                f"A note for goal '{goal_title}' has already been added on "
                f"{on_date.isoformat()}. Only one note per goal per day is allowed."
            ),
            entity=goal_title,
            on_date=on_date,
            user_message=f"You already added a note for '{goal_title}' today.",
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(TrajectoryError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message=f"Engine configuration is invalid ({config_key or 'unknown setting'}).",
            context={"config_key": config_key},
            **kwargs
        )
