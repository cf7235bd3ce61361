"""Where a request came from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

MAX_CLIENT_LENGTH = 500


@dataclass(frozen=True, slots=True)
class RequestOrigin:
    address: Optional[str] = None
    client: Optional[str] = None

    @classmethod
    def from_headers(
        cls,
        *,
        peer: Optional[str],
        forwarded_for: Optional[str],
        user_agent: Optional[str],
        trust_proxy: bool = False,
    ) -> "RequestOrigin":
        # 信任反向代理时取 X-Forwarded-For 的第一个地址
        address = peer
        if trust_proxy and forwarded_for:
            first = forwarded_for.split(",")[0].strip()
            address = first or peer
        client = user_agent[:MAX_CLIENT_LENGTH] if user_agent else None
        return cls(address=address, client=client)
