"""LinkedIn Marketing REST API client (versioned ``/rest`` endpoints)."""
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class LinkedInRestClient:
    """Async client for the LinkedIn REST API.

    All methods expect a valid member or organization access token.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.linkedin.com/rest",
        api_version: str = "202405",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "X-Restli-Protocol-Version": "2.0.0",
                "LinkedIn-Version": api_version,
            },
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        resp = await self._client.get(path, params=params)
        resp.raise_for_status()
        return resp.json()

    # ── Social actions ──

    async def get_social_actions(self, post_urn: str) -> dict[str, Any]:
        """Likes and comments summary of a share or UGC post."""
        return await self._get(f"/socialActions/{post_urn}")

    # ── Organization statistics ──

    async def get_share_statistics(self, organization_id: str, post_urn: str) -> dict[str, Any]:
        return await self._get(
            "/organizationalEntityShareStatistics",
            params={
                "q": "organizationalEntity",
                "organizationalEntity": f"urn:li:organization:{organization_id}",
                "shares[0]": post_urn,
            },
        )

    async def get_page_statistics(self, organization_id: str) -> dict[str, Any]:
        return await self._get(
            "/organizationPageStatistics",
            params={"q": "organization", "organization": f"urn:li:organization:{organization_id}"},
        )
