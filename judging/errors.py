from typing import Any, Optional


class JudgingError(Exception):
    """Base exception for all judging errors."""

    pass


class ConfigurationError(JudgingError):
    """Raised at startup when settings describe an unsupported setup."""

    pass


class ValidationError(JudgingError):
    """Bad or missing input. Always recoverable by correcting the input."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class MissingScoreError(ValidationError):
    """A field required by the score model is absent."""

    def __init__(self, field: str):
        super().__init__(f"Score '{field}' is required", field=field)


class ScoreOutOfRangeError(ValidationError):
    """A value is not an integer within the field's declared range."""

    def __init__(self, field: str, value: Any, low: int, high: int):
        super().__init__(
            f"Score '{field}' must be an integer between {low} and {high}, got {value!r}",
            field=field,
        )
        self.value = value
        self.low = low
        self.high = high


class UnknownFieldError(ValidationError):
    """The field name is not declared by the score model."""

    def __init__(self, field: str):
        super().__init__(f"Unknown score field '{field}'", field=field)


class NotFoundError(JudgingError):
    """A team or evaluation id does not exist."""

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity.capitalize()} {key!r} not found")
        self.entity = entity
        self.key = key


class UnknownTeamError(NotFoundError, ValidationError):
    """A submission references a missing team, or an inactive one."""

    def __init__(self, team_id: Any, inactive: bool = False):
        JudgingError.__init__(
            self,
            f"Team {team_id!r} is not active"
            if inactive
            else f"Team {team_id!r} not found",
        )
        self.entity = "team"
        self.key = team_id
        self.field = "team_id"
        self.inactive = inactive


class ConflictError(JudgingError):
    """A uniqueness constraint was violated. `field` names the collision."""

    reason: str = "Conflict"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DuplicateNumberError(ConflictError):
    reason = "DuplicateNumber"

    def __init__(self, number: Any = None):
        super().__init__(
            f"Team number {number} already exists. Please use a different number.",
            field="number",
        )
        self.number = number


class DuplicateNameError(ConflictError):
    reason = "DuplicateName"

    def __init__(self, name: Any = None):
        super().__init__(f"Team name {name!r} already exists", field="name")
        self.name = name


class DependencyError(JudgingError):
    """A delete is blocked by records that still reference the target."""

    def __init__(self, message: str, blocking_count: int):
        super().__init__(message)
        self.blocking_count = blocking_count


class TeamHasEvaluationsError(DependencyError):
    def __init__(self, team_id: Any, blocking_count: int):
        super().__init__(
            f"Cannot delete team {team_id!r} with {blocking_count} existing "
            "evaluation(s). Please delete evaluations first.",
            blocking_count=blocking_count,
        )
        self.team_id = team_id


class StoreError(JudgingError):
    """The persistence store failed. Terminal for the request, never retried."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class AdminAccessError(JudgingError):
    """An admin-only operation was attempted without a valid capability."""

    pass
