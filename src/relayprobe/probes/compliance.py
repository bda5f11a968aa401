"""
Protocol compliance scoring.

[ComplianceTester.test_compliance()][relayprobe.probes.compliance.ComplianceTester.test_compliance]
combines what a relay advertises in its NIP-11 document (NIP-01, NIP-42
and NIP-45 support) with what it empirically does (three sequential
connection attempts). [ComplianceTester.compare()][relayprobe.probes.compliance.ComplianceTester.compare]
scores several relays concurrently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relayprobe.models.constants import COMPLIANCE_TRIALS, Nip
from relayprobe.models.results import ComplianceResult
from relayprobe.nips.nip11 import Nip11InfoMetadata

from .base import BaseProbe, gather_in_order
from .health import HealthProbe


if TYPE_CHECKING:
    from collections.abc import Sequence

    from relayprobe.core.config import ProbeConfig


class ComplianceTester(BaseProbe):
    """NIP-11 and connectivity based compliance scoring.

    Examples:
        ```python
        tester = ComplianceTester()
        result = await tester.test_compliance("wss://nos.lol")
        result.nip01_compliant, result.success_rate
        ```
    """

    LOGGER_NAME = "relayprobe.compliance"

    def __init__(self, config: ProbeConfig | None = None) -> None:
        super().__init__(config)
        self._health = HealthProbe(self._config)

    async def fetch_info(self, url: str) -> Nip11InfoMetadata:
        """Fetch the relay's NIP-11 document with the configured limits."""
        return await Nip11InfoMetadata.execute(
            url,
            timeout=self._config.timeouts.info,
            max_size=self._config.transport.info_max_size,
            proxy_url=self._config.proxy_for(url),
            allow_insecure=self._config.transport.allow_insecure,
        )

    async def test_compliance(self, url: str) -> ComplianceResult:
        """Score one relay.

        The NIP flags stay False when the NIP-11 fetch fails or the document
        lists no ``supported_nips``. The relay is then pinged exactly
        ``COMPLIANCE_TRIALS`` times in sequence; failed pings are not
        retried and contribute no latency sample.

        Args:
            url: Relay WebSocket URL.

        Returns:
            A [ComplianceResult][relayprobe.models.results.ComplianceResult]
            with ``success_rate = successes / tested``.
        """
        info = await self.fetch_info(url)
        if not info.logs.success:
            self._logger.debug("nip11_unavailable", url=url, reason=info.logs.reason)

        latencies: list[float] = []
        for attempt in range(COMPLIANCE_TRIALS):
            ping = await self._health.ping(url)
            if ping.success:
                latencies.append(ping.latency)
            else:
                self._logger.debug(
                    "ping_failed", url=url, attempt=attempt + 1, error=ping.error_message
                )

        result = ComplianceResult(
            url=url,
            nip01_compliant=info.data.supports(Nip.BASIC_PROTOCOL),
            supports_auth=info.data.supports(Nip.AUTHENTICATION),
            supports_count=info.data.supports(Nip.EVENT_COUNTS),
            average_latency=sum(latencies) / len(latencies) if latencies else 0.0,
            success_rate=len(latencies) / COMPLIANCE_TRIALS,
            tested=COMPLIANCE_TRIALS,
        )
        self._logger.info(
            "compliance_tested",
            url=url,
            nip01=result.nip01_compliant,
            success_rate=round(result.success_rate, 2),
        )
        return result

    async def compare(self, urls: Sequence[str]) -> list[ComplianceResult]:
        """Score several relays concurrently.

        Returns:
            One result per URL, in input order. A relay whose scoring fails
            unexpectedly gets an all-false result with ``success_rate=0``
            and ``tested=0``.
        """
        return await gather_in_order(urls, self.test_compliance, self._failed_result)

    def _failed_result(self, url: str, error: Exception) -> ComplianceResult:
        self._logger.error("compliance_failed", url=url, error=str(error))
        return ComplianceResult(url=url, tested=0)


async def check_compliance(url: str) -> ComplianceResult:
    """Run [ComplianceTester.test_compliance()][relayprobe.probes.compliance.ComplianceTester.test_compliance] with default settings."""
    return await ComplianceTester().test_compliance(url)


async def compare_relays(urls: Sequence[str]) -> list[ComplianceResult]:
    """Run [ComplianceTester.compare()][relayprobe.probes.compliance.ComplianceTester.compare] with default settings."""
    return await ComplianceTester().compare(urls)
