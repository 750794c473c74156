"""
AgentFlow - Exceptions

This module contains all custom exceptions raised by the wizard engine
and the API client.
"""

from typing import Any, Dict, List, Optional


class AgentFlowError(Exception):
    """
    Base exception for all AgentFlow errors.

    Attributes:
        message: Human-readable error message
        code: Error code if available
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', code='{self.code}')"


# =============================================================================
# WIZARD ERRORS
# =============================================================================


class ValidationError(AgentFlowError):
    """
    Raised when a step cannot be completed because required fields are empty.

    Recoverable: the view layer re-presents the missing fields to the user.

    Attributes:
        step_id: Step that failed validation
        missing_fields: Required fields that are still empty
    """

    def __init__(
        self,
        message: str = "Required fields are missing",
        step_id: Optional[int] = None,
        missing_fields: Optional[List[str]] = None,
    ) -> None:
        self.step_id = step_id
        self.missing_fields = list(missing_fields or [])
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"step_id": step_id, "missing_fields": self.missing_fields},
        )

    def __str__(self) -> str:
        base = super().__str__()
        if self.missing_fields:
            return f"{base} ({', '.join(self.missing_fields)})"
        return base


class NavigationError(AgentFlowError):
    """
    Raised when a navigation target is not reachable from the current step.

    Attributes:
        target_step_id: The step that was requested
    """

    def __init__(
        self,
        message: str = "Navigation not allowed",
        target_step_id: Optional[int] = None,
        code: str = "NAVIGATION_ERROR",
    ) -> None:
        self.target_step_id = target_step_id
        super().__init__(message, code=code, details={"target_step_id": target_step_id})


class TransitionInProgressError(NavigationError):
    """Raised when a transition is requested while another one is pending."""

    def __init__(self, message: str = "Another transition is still in progress") -> None:
        super().__init__(message, code="TRANSITION_IN_PROGRESS")


class InvalidStateError(AgentFlowError):
    """
    Raised when an action is attempted in a state that does not accept it.

    This occurs when:
    - The wizard has already been completed
    - The controller has been disposed by its host view
    """

    def __init__(self, message: str = "Action not allowed in the current state") -> None:
        super().__init__(message, code="INVALID_STATE")


class StepNotFoundError(AgentFlowError):
    """
    Raised when a step id does not exist in the registry.

    Attributes:
        step_id: The unknown step id
    """

    def __init__(
        self,
        message: Optional[str] = None,
        step_id: Optional[int] = None,
    ) -> None:
        self.step_id = step_id
        super().__init__(
            message or f"Step {step_id} not found",
            code="STEP_NOT_FOUND",
            details={"step_id": step_id},
        )


class InvalidSnapshotError(AgentFlowError):
    """
    Raised when a persisted snapshot cannot be used to resume a wizard.

    This can occur when:
    - The current step does not exist in the registry
    - A completed step does not exist in the registry
    - The server payload is malformed
    """

    def __init__(self, message: str = "Invalid wizard snapshot") -> None:
        super().__init__(message, code="INVALID_SNAPSHOT")


# =============================================================================
# PERSISTENCE ERRORS
# =============================================================================


class PersistenceError(AgentFlowError):
    """Base class for failures of the save/load API."""


class NetworkError(PersistenceError):
    """
    Raised when the request never produced an HTTP response.

    Attributes:
        timeout: True when the failure was a timeout
    """

    def __init__(self, message: str = "Network request failed", timeout: bool = False) -> None:
        super().__init__(message, code="NETWORK_ERROR")
        self.timeout = timeout


class ServerError(PersistenceError):
    """
    Raised when the API answers with a non-success status.

    Attributes:
        status_code: HTTP status code of the response
        request_id: Request ID for debugging
    """

    def __init__(
        self,
        message: str = "Server error",
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        code: str = "SERVER_ERROR",
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code
        self.request_id = request_id

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code:
            base = f"{base} (HTTP {self.status_code})"
        if self.request_id:
            return f"{base} (Request ID: {self.request_id})"
        return base


class AuthenticationError(ServerError):
    """
    Raised when the API rejects the credentials.

    This can occur when:
    - API key is invalid or expired
    - API key lacks access to the organization
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: Optional[int] = 401,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            request_id=request_id,
            code="AUTHENTICATION_ERROR",
        )
