"""Header construction for upstream requests."""

from collections.abc import Mapping
from types import MappingProxyType


class HeaderBuilder:
    """Build outbound headers from defaults and caller-supplied values."""

    def __init__(self, user_agent: str = "API-Tester-Proxy/1.0"):
        self.user_agent = user_agent

    def build_outbound_headers(
        self,
        headers: Mapping[str, str],
        *,
        json_body: bool = False,
    ) -> Mapping[str, str]:
        """Overlay caller headers on the defaults; the caller wins on collision.

        Names are compared case-insensitively and the caller's spelling is kept.
        ``Content-Type: application/json`` is added for structured bodies
        unless the caller already set a content type.
        """
        upstream: dict[str, str] = {"User-Agent": self.user_agent}
        for key, value in headers.items():
            for existing in [k for k in upstream if k.lower() == key.lower()]:
                del upstream[existing]
            upstream[key] = str(value)

        if json_body and not has_header(upstream, "content-type"):
            upstream["Content-Type"] = "application/json"
        return MappingProxyType(upstream)


def has_header(headers: Mapping[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)
