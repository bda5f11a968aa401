"""
Result values returned by the probe operations.

Every public probe operation folds its outcome, success or failure, into
one of these frozen Pydantic models instead of raising. Results are built
once at the end of an operation and never mutated.

Latencies are float milliseconds; timestamps are integer Unix seconds.

See Also:
    [relayprobe.probes][relayprobe.probes]: The operations that produce
        these results.
    [BaseLogs][relayprobe.nips.base.BaseLogs]: Same success/reason
        invariant applied to NIP-11 fetch logs.
"""

from __future__ import annotations

from time import time
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    StrictBool,
    model_validator,
)

from .constants import COMPLIANCE_TRIALS


def _now() -> int:
    return int(time())


class _BaseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


class HealthCheckResult(_BaseResult):
    """Outcome of [HealthProbe.check()][relayprobe.probes.health.HealthProbe.check].

    Attributes:
        url: Probed endpoint, as given by the caller.
        is_healthy: True when the WebSocket connection opened in time.
        latency: Connect round trip in ms (0 when unhealthy).
        supports_read: True when the test subscription was sent.
        supports_write: Assumed from connection success; no event is published.
        response_time: Same measurement as ``latency``.
        timestamp: Unix seconds when the check finished.
        error_message: Failure text; set if and only if ``is_healthy`` is False.
    """

    url: str
    is_healthy: StrictBool
    latency: NonNegativeFloat = 0.0
    supports_read: StrictBool = False
    supports_write: StrictBool = False
    response_time: NonNegativeFloat = 0.0
    timestamp: NonNegativeInt = Field(default_factory=_now)
    error_message: str | None = None

    @model_validator(mode="after")
    def validate_semantic(self) -> Self:
        """Enforce is_healthy/error_message consistency."""
        if self.is_healthy and self.error_message is not None:
            raise ValueError("error_message must be None when is_healthy is True")
        if not self.is_healthy and self.error_message is None:
            raise ValueError("error_message is required when is_healthy is False")
        return self


class PingResult(_BaseResult):
    """Outcome of [HealthProbe.ping()][relayprobe.probes.health.HealthProbe.ping].

    ``latency`` is the time from the start of the attempt until the
    connection opened (or until the failure, when ``success`` is False).
    """

    url: str
    success: StrictBool
    latency: NonNegativeFloat = 0.0
    error_message: str | None = None

    @model_validator(mode="after")
    def validate_semantic(self) -> Self:
        """Enforce success/error_message consistency."""
        if self.success and self.error_message is not None:
            raise ValueError("error_message must be None when success is True")
        if not self.success and self.error_message is None:
            raise ValueError("error_message is required when success is False")
        return self


class ComplianceResult(_BaseResult):
    """Outcome of [ComplianceTester.test_compliance()][relayprobe.probes.compliance.ComplianceTester.test_compliance].

    The NIP flags come from the relay's NIP-11 ``supported_nips`` list and
    stay False when the document is missing or does not list any. The
    connectivity figures come from a fixed number of sequential pings.

    Attributes:
        url: Probed endpoint.
        nip01_compliant: NIP-01 advertised.
        supports_auth: NIP-42 advertised.
        supports_count: NIP-45 advertised.
        average_latency: Mean of successful ping latencies in ms, 0 if none.
        success_rate: Successful pings over trials, in ``[0, 1]``.
        tested: Number of ping trials run.
    """

    url: str
    nip01_compliant: StrictBool = False
    supports_auth: StrictBool = False
    supports_count: StrictBool = False
    average_latency: NonNegativeFloat = 0.0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    tested: NonNegativeInt = COMPLIANCE_TRIALS


class PublishResult(_BaseResult):
    """Outcome of publishing one event to one relay.

    Attributes:
        relay: Target endpoint.
        success: True only when a matching ``OK`` with a truthy flag arrived
            before the deadline.
        event_id: Id of the published event.
        message: Relay message, ``"Event published"`` when the relay sent an
            empty one, or the failure reason.
        timestamp: Unix seconds when the publish resolved.
        latency: Elapsed ms from the start of the publish to the deciding
            event (acknowledgement, close, error or timeout).
    """

    relay: str
    success: StrictBool
    event_id: str
    message: str
    timestamp: NonNegativeInt = Field(default_factory=_now)
    latency: NonNegativeFloat = 0.0


class StressTestResult(_BaseResult):
    """Outcome of [StressRunner.run()][relayprobe.probes.stress.StressRunner.run].

    Attributes:
        url: Target endpoint.
        total_connections: Attempts launched.
        successful_connections: Attempts that connected.
        failed_connections: Attempts that did not connect.
        average_latency: Mean connect latency over successful attempts, ms.
        duration: Elapsed wall clock for the whole run, ms.
        requested_duration: Duration requested by the caller, seconds. It is
            reported as given and does not cut the run short.
    """

    url: str
    total_connections: NonNegativeInt
    successful_connections: NonNegativeInt
    failed_connections: NonNegativeInt
    average_latency: NonNegativeFloat = 0.0
    duration: NonNegativeFloat = 0.0
    requested_duration: NonNegativeFloat = 0.0

    @model_validator(mode="after")
    def validate_totals(self) -> Self:
        """Ensure every attempt is counted exactly once."""
        if self.successful_connections + self.failed_connections != self.total_connections:
            raise ValueError(
                f"successful ({self.successful_connections}) + failed "
                f"({self.failed_connections}) must equal total ({self.total_connections})"
            )
        return self
