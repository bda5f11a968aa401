"""
NIP-11 fetch operation log model.

Records whether a [NIP-11](https://github.com/nostr-protocol/nips/blob/master/11.md)
HTTP fetch succeeded or failed, with an error reason string when the
operation was unsuccessful.
"""

from __future__ import annotations

from relayprobe.nips.base import BaseLogs


class Nip11InfoLogs(BaseLogs):
    """Log record for a NIP-11 relay information document fetch.

    Inherits success/reason validation from
    [BaseLogs][relayprobe.nips.base.BaseLogs].

    Note:
        Common failure reasons include non-2xx HTTP statuses, oversized
        responses, JSON parse failures, SSL certificate errors and
        connection timeouts.
    """
