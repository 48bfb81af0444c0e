"""
Custom exceptions for the application.
All API exceptions should inherit from APIException for consistent error handling.
"""
from typing import Optional, Any


class APIException(Exception):
    """
    Base exception for all API errors.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Any] = None,
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(self.message)


class BadRequestException(APIException):
    """400 Bad Request"""

    def __init__(self, message: str = "Bad request", code: str = "BAD_REQUEST"):
        super().__init__(400, code, message)


class UnauthorizedException(APIException):
    """401 Unauthorized"""

    def __init__(self, message: str = "Unauthorized", code: str = "UNAUTHORIZED"):
        super().__init__(401, code, message)


class ForbiddenException(APIException):
    """403 Forbidden"""

    def __init__(self, message: str = "Forbidden", code: str = "FORBIDDEN"):
        super().__init__(403, code, message)


class NotFoundException(APIException):
    """404 Not Found"""

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "NOT_FOUND",
        details: Optional[Any] = None,
    ):
        super().__init__(404, code, message, details)


class ConflictException(APIException):
    """
    Conflict with the current state of a resource.

    Defaults to 409; skill-graph conflicts are reported as 400 so the admin
    UI can render the blocking references next to the form.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        code: str = "CONFLICT",
        details: Optional[Any] = None,
        status_code: int = 409,
    ):
        super().__init__(status_code, code, message, details)


# Authentication specific exceptions
class TokenExpiredException(UnauthorizedException):
    """Token has expired"""

    def __init__(self):
        super().__init__(
            message="Token has expired",
            code="TOKEN_EXPIRED",
        )


class InvalidTokenException(UnauthorizedException):
    """Token is invalid"""

    def __init__(self):
        super().__init__(
            message="Invalid token",
            code="INVALID_TOKEN",
        )


# Skill graph exceptions
class SkillNotFoundException(NotFoundException):
    """Skill not found"""

    def __init__(self, identifier: Any = None):
        super().__init__(
            message="Skill not found",
            code="SKILL_NOT_FOUND",
            details={"identifier": str(identifier)} if identifier is not None else None,
        )


class EntityNotFoundException(NotFoundException):
    """Project / certification / education entry not found"""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} not found",
            code="ENTITY_NOT_FOUND",
            details={"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class InvalidEntityTypeException(BadRequestException):
    """Entity type is not one of project, certification, education"""

    def __init__(self, entity_type: str):
        super().__init__(
            message=(
                f"Invalid entity type '{entity_type}'. "
                "Must be project, certification, or education"
            ),
            code="INVALID_ENTITY_TYPE",
        )


class SkillExistsException(ConflictException):
    """Another skill already uses this name (case-insensitive)"""

    def __init__(self, name: str):
        super().__init__(
            message=f"Skill '{name}' already exists",
            code="SKILL_EXISTS",
        )


class SkillInUseException(ConflictException):
    """Delete blocked by active references"""

    def __init__(self, active_references: list):
        super().__init__(
            message=(
                "Cannot delete skill. It is referenced by "
                f"{len(active_references)} active items."
            ),
            code="SKILL_IN_USE",
            details={"active_references": active_references},
            status_code=400,
        )


class SkillAlreadyLinkedException(ConflictException):
    """Explicit link requested for a pair that is already linked"""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message="Skill is already linked to this entity",
            code="SKILL_ALREADY_LINKED",
            details={"entity_type": entity_type, "entity_id": str(entity_id)},
            status_code=400,
        )
