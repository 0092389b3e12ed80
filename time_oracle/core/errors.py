"""Exception types for the time oracle.

Raised by ``step_or_raise()`` in ``engine.py`` and by the ``TimeOracle`` shell,
for callers that prefer exceptions over ``StepResult`` inspection.

Every class carries the ``code`` that ``step()`` reports as its rejection, and a
``retryable`` hint for the off-chain submitter: retryable rejections can
succeed later without operator action (unpause, clock re-sync, fresh value);
the rest need a configuration or credential change.
"""

from __future__ import annotations


REJECT_PARAM_DOMAIN = "param_domain"
REJECT_NOT_OWNER = "not_owner"
REJECT_ZERO_PRINCIPAL = "zero_principal"
REJECT_UNAUTHORIZED_UPDATER = "unauthorized_updater"
REJECT_PAUSED = "paused"
REJECT_INVALID_TIMESTAMP = "invalid_timestamp"
REJECT_TOO_FAR_IN_FUTURE = "validation_failed:future"
REJECT_TOO_FAR_IN_PAST = "validation_failed:past"
REJECT_INVARIANT = "invariant"


class OracleError(Exception):
    """Base class for every rejection of a single oracle call."""

    code: str = "oracle_error"
    retryable: bool = False


class OracleAuthError(OracleError):
    """Caller lacks the capability the operation requires."""


class NotOwner(OracleAuthError):
    code = REJECT_NOT_OWNER

    def __init__(self, caller: str = "") -> None:
        self.caller = caller
        super().__init__(f"caller is not the owner: {caller}" if caller else "caller is not the owner")


class UnauthorizedUpdater(OracleAuthError):
    code = REJECT_UNAUTHORIZED_UPDATER

    def __init__(self, caller: str) -> None:
        self.caller = caller
        super().__init__(f"unauthorized updater: {caller}")


class ZeroPrincipal(OracleError):
    """Attempt to authorize (or install as owner) the null address."""

    code = REJECT_ZERO_PRINCIPAL

    def __init__(self, message: str = "zero address is not a valid principal") -> None:
        super().__init__(message)


class OraclePausedError(OracleError):
    code = REJECT_PAUSED
    retryable = True

    def __init__(self, message: str = "oracle is paused") -> None:
        super().__init__(message)


class OracleValidationError(OracleError):
    """Submitted timestamp failed the validation stage."""

    retryable = True


class InvalidTimestamp(OracleValidationError):
    """Zero or non-monotonic timestamp."""

    code = REJECT_INVALID_TIMESTAMP

    def __init__(self, provided: int, current: int) -> None:
        self.provided = provided
        self.current = current
        super().__init__(f"invalid timestamp: provided={provided} current={current}")


class TimestampValidationFailed(OracleValidationError):
    """Timestamp outside the drift bound around the environment's clock."""

    def __init__(self, reason: str, *, code: str = REJECT_TOO_FAR_IN_FUTURE) -> None:
        self.reason = reason
        self.code = code
        super().__init__(f"timestamp validation failed: {reason}")


class OracleParamError(OracleError, ValueError):
    """Raised when a parameter falls outside its domain (u256 range, address shape)."""

    code = REJECT_PARAM_DOMAIN

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"parameter out of domain: {field}")


class OracleInvariantError(OracleError):
    """Raised when a post-state violates one or more invariants."""

    code = REJECT_INVARIANT

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


class CalldataError(OracleError, ValueError):
    """Malformed `updateTimestamp(uint256)` calldata."""

    code = "calldata"
