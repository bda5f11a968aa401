"""Probe operations: health, compliance, publishing, stress and monitoring.

Every component creates and tears down its own
[ConnectionSession][relayprobe.utils.transport.ConnectionSession] objects
and reports failures through its result values instead of raising.

Attributes:
    HealthProbe: ``check()`` and ``ping()``.
    ComplianceTester: ``test_compliance()`` and the concurrent ``compare()``.
    PublishCoordinator: ``publish()`` and the concurrent ``batch_publish()``.
    StressRunner: ``run()``.
    RelayMonitor: Long-lived connection monitor driven by external cancel.
"""

from .base import BaseProbe, gather_in_order
from .compliance import ComplianceTester, check_compliance, compare_relays
from .health import HealthProbe, check_health, ping_relay
from .monitor import RelayMonitor
from .publish import PublishCoordinator, batch_publish, publish_event
from .stress import StressRunner, stress_test


__all__ = [
    "BaseProbe",
    "ComplianceTester",
    "HealthProbe",
    "PublishCoordinator",
    "RelayMonitor",
    "StressRunner",
    "batch_publish",
    "check_compliance",
    "check_health",
    "compare_relays",
    "gather_in_order",
    "ping_relay",
    "publish_event",
    "stress_test",
]
