# src/shared/common/clients.py
"""
HTTP Clients for Service Communication

Clients receive an explicit SessionContext carrying the bearer token and the
callback to run when the token is rejected.
"""

import httpx
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Any, Optional

from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================

class ServiceClientError(Exception):
    """Base error raised by service clients"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFoundError(ServiceClientError):
    """The requested resource does not exist or is not visible"""
    pass


class SessionExpiredError(ServiceClientError):
    """The bearer token was rejected (HTTP 401)"""
    pass


class RequestValidationError(ServiceClientError):
    """The server rejected the request payload (HTTP 400)"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, status_code=400)
        self.details = details or {}


class TransientIOFailure(ServiceClientError):
    """Network failure or 5xx response; the caller may retry"""
    pass


# =============================================================================
# SESSION CONTEXT
# =============================================================================

@dataclass
class SessionContext:
    """
    Per-session credentials.

    Attributes:
        token: Bearer token sent with every request
        on_expire: Called once per rejected request when the server answers 401
    """
    token: Optional[str] = None
    on_expire: Optional[Callable[[], None]] = field(default=None, repr=False)

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {'Authorization': f'Bearer {self.token}'}

    def expire(self) -> None:
        if self.on_expire is not None:
            self.on_expire()


# =============================================================================
# BASE SERVICE CLIENT
# =============================================================================

class BaseServiceClient:
    """
    Base class for HTTP communication with a service.
    """

    def __init__(
        self,
        service_name: str,
        session: SessionContext,
        base_url: str = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.service_name = service_name
        self.session = session
        self.base_url = base_url or self._get_service_url(service_name)
        self.timeout = httpx.Timeout(10.0, connect=5.0)
        self.transport = transport

    def _get_service_url(self, service_name: str) -> str:
        """Get service URL from settings"""
        service_urls = getattr(settings, 'SERVICE_URLS', {})
        return service_urls.get(service_name, f'http://{service_name}:8000')

    def _get_headers(self, extra_headers: Dict = None) -> Dict:
        """Build request headers"""
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            **self.session.auth_headers(),
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    @staticmethod
    def _error_payload(response: httpx.Response) -> Dict[str, Any]:
        """Return the ``error`` object of the response envelope, or {}."""
        try:
            body = response.json()
        except ValueError:
            return {}
        error = body.get('error') if isinstance(body, dict) else None
        return error if isinstance(error, dict) else {}

    def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status < 400:
            return

        error = self._error_payload(response)
        message = error.get('message') or response.reason_phrase
        logger.error(
            f"HTTP error calling {self.service_name}: {status}",
            extra={'url': url, 'status_code': status}
        )

        if status == 401:
            self.session.expire()
            raise SessionExpiredError(message, status_code=status)
        if status == 404:
            raise ResourceNotFoundError(message, status_code=status)
        if status == 400:
            raise RequestValidationError(message, details=error.get('details'))
        if status >= 500:
            raise TransientIOFailure(message, status_code=status)
        raise ServiceClientError(message, status_code=status)

    async def _request(
        self,
        method: str,
        path: str,
        params: Dict = None,
        data: Dict = None,
        headers: Dict = None
    ) -> Any:
        """Make HTTP request to service"""
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=data,
                    headers=self._get_headers(headers)
                )
            except httpx.RequestError as e:
                logger.error(f"Request error calling {self.service_name}: {e}")
                raise TransientIOFailure(str(e)) from e

        self._raise_for_status(response, url)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, params: Dict = None, headers: Dict = None) -> Any:
        return await self._request('GET', path, params=params, headers=headers)

    async def post(self, path: str, data: Dict = None, headers: Dict = None) -> Any:
        return await self._request('POST', path, data=data, headers=headers)

    async def put(self, path: str, data: Dict = None, headers: Dict = None) -> Any:
        return await self._request('PUT', path, data=data, headers=headers)

    async def patch(self, path: str, data: Dict = None, headers: Dict = None) -> Any:
        return await self._request('PATCH', path, data=data, headers=headers)

    async def delete(self, path: str, headers: Dict = None) -> Any:
        return await self._request('DELETE', path, headers=headers)
