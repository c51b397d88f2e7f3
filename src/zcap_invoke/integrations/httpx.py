from typing import Any, AsyncGenerator, Generator, Optional

import httpx

from zcap_invoke.invoke import (
    async_sign_capability_invocation,
    sign_capability_invocation,
)
from zcap_invoke.key import Signer

# Hop-by-hop headers may be rewritten by proxies, signing them would break
# verification on the other side.
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-connection",
    "te",
    "transfer-encoding",
    "upgrade",
}


class CapabilityInvocationAuth(httpx.Auth):
    """Authentication scheme for httpx clients that signs every request as
    an invocation of a capability.

    Example:
        auth = CapabilityInvocationAuth(signer, capability_action="read")
        httpx.get("https://example.com/documents/1", auth=auth)
    """

    requires_request_body = True

    def __init__(
        self,
        invocation_signer: Signer,
        capability: Any = None,
        capability_action: Optional[str] = None,
    ):
        self.invocation_signer = invocation_signer
        self.capability = capability
        self.capability_action = capability_action

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        signed = sign_capability_invocation(**self._arguments(request))
        request.headers.update(signed)
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        await request.aread()
        signed = await async_sign_capability_invocation(**self._arguments(request))
        request.headers.update(signed)
        yield request

    def _arguments(self, request: httpx.Request) -> dict[str, Any]:
        headers = {
            name: value
            for name, value in request.headers.items()
            if name.lower() not in HOP_BY_HOP_HEADERS
        }
        return dict(
            url=str(request.url),
            method=request.method,
            headers=headers,
            body=request.content or None,
            invocation_signer=self.invocation_signer,
            capability=self.capability,
            capability_action=self.capability_action,
        )
