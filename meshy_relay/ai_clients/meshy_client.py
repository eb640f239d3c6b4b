import httpx
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

MESHY_API_BASE_URL = "https://api.meshy.ai"
TEXT_TO_3D_PATH = "/openapi/v2/text-to-3d"

class MeshyClient:
    """Async client for the Meshy text-to-3D API.

    The API key is supplied at construction and only attached to calls against
    the Meshy API itself, never to the CDN URLs returned in task metadata.
    Responses are handed back as raw ``httpx.Response`` objects so callers can
    relay upstream bodies byte-for-byte.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = MESHY_API_BASE_URL,
        timeout: Optional[float] = None,
        download_timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.download_timeout = download_timeout
        client_kwargs: Dict[str, Any] = {"transport": transport}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        self._http = httpx.AsyncClient(**client_kwargs)

    @property
    def text_to_3d_url(self) -> str:
        return f"{self.base_url}{TEXT_TO_3D_PATH}"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def aclose(self) -> None:
        await self._http.aclose()

    async def create_text_to_3d_task(self, payload: Dict[str, Any]) -> httpx.Response:
        """Creates a preview or refine task. The body is returned as Meshy sent it, e.g. {"result": "<task_id>"}."""
        url = self.text_to_3d_url
        headers = {**self._auth_headers(), "Content-Type": "application/json"}

        logger.info(f"Calling Meshy text-to-3D API ({payload.get('mode')}): {url}")
        logger.info(f"Request payload keys: {list(payload.keys())}")

        try:
            response = await self._http.post(url, json=payload, headers=headers)
            response.raise_for_status()
            logger.info(f"Meshy text-to-3D API response ({payload.get('mode')}): {response.status_code}")
            return response
        except httpx.HTTPStatusError as e:
            logger.error(f"Meshy HTTP error creating {payload.get('mode')} task: {e.response.status_code} - {e.response.text}")
            raise
        except Exception as e:
            logger.error(f"Error calling Meshy text-to-3D API ({payload.get('mode')}): {e}", exc_info=True)
            raise

    async def get_text_to_3d_task(self, task_id: str) -> httpx.Response:
        """Fetches the full task object for a preview or refine task."""
        url = f"{self.text_to_3d_url}/{task_id}"

        logger.info(f"Fetching Meshy task status for ID: {task_id}")
        try:
            response = await self._http.get(url, headers=self._auth_headers())
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(f"Meshy HTTP error fetching task {task_id}: {e.response.status_code} - {e.response.text}")
            raise
        except Exception as e:
            logger.error(f"Error fetching Meshy task {task_id}: {e}", exc_info=True)
            raise

    async def open_model_stream(self, model_url: str) -> httpx.Response:
        """Opens a streaming GET on a model file URL.

        Redirects are followed. The body is not read. The caller owns the returned response and must
        ``aclose()`` it once the bytes have been consumed.
        """
        logger.info(f"Opening model download stream: {model_url}")
        request = self._http.build_request("GET", model_url, timeout=self.download_timeout)
        response = await self._http.send(request, stream=True, follow_redirects=True)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            await response.aclose()
            raise
        return response
