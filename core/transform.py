"""Translation of proxy requests into outbound requests."""

import json

from core.headers import HeaderBuilder
from core.request_types import OutboundRequest, ProxyRequest


class RequestTransformer:
    """Serialize the caller's body and assemble the outbound request."""

    def __init__(self, header_builder: HeaderBuilder):
        self._headers = header_builder

    def build_outbound(self, request: ProxyRequest) -> OutboundRequest:
        content = None
        json_body = False

        # GET and HEAD never carry a body, whatever the caller sent
        if request.allows_body and request.body is not None:
            content, json_body = self.serialize_body(request.body)

        return OutboundRequest(
            method=request.method,
            url=request.url,
            headers=self._headers.build_outbound_headers(request.headers, json_body=json_body),
            content=content,
            timeout_ms=request.timeout_ms,
        )

    @staticmethod
    def serialize_body(body: object) -> tuple[bytes, bool]:
        """Return the encoded body and whether it was JSON-encoded."""
        if isinstance(body, str):
            return body.encode("utf-8"), False
        text = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
        return text.encode("utf-8"), True
