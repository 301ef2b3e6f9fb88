"""HTTP client for a hosted food analysis function."""

from dataclasses import dataclass
from uuid import UUID

import httpx

from food_ledger.services.analysis import AnalysisClient


@dataclass
class HttpxFunctionAnalysisClient(AnalysisClient):
    """Posts ``{imageData, userId}`` to an analysis endpoint."""

    url: str
    api_key: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str, api_key: str) -> "HttpxFunctionAnalysisClient":
        """Create a function client with a managed httpx session."""
        return cls(url=url, api_key=api_key, http_client=httpx.AsyncClient())

    async def analyze(
        self,
        *,
        image_data_url: str,
        user_id: UUID,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Invoke the function; prompt and schema are owned by the function."""
        response = await self.http_client.post(
            self.url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"imageData": image_data_url, "userId": str(user_id)},
            timeout=None,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise RuntimeError("Analysis function returned a non-object payload")
        if isinstance(payload.get("error"), dict | str):
            raise RuntimeError(f"Analysis function error: {payload['error']}")
        data = payload.get("data", payload)
        if not isinstance(data, dict):
            raise RuntimeError("Analysis function returned no data")
        return data

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
