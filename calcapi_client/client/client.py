"""HTTP client for the remote calculation API."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, PrivateAttr, ValidationError
import requests

from calcapi_client.common.config import ClientSettings
from calcapi_client.common.logger import logger
from calcapi_client.common.models import CalculationResponse, ErrorResponse, Evaluation

# Message used when the API fails without telling why
DEFAULT_ERROR_MESSAGE = "API request failed"


class CalculationError(Exception):
    """
    A remote calculation failed.

    ``server_message`` holds the reason reported by the API, if any; transport
    failures and bodies without an ``error`` field leave it unset.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.server_message = server_message


class CalculationClient(BaseModel):
    """
    HTTP client responsible for sending one operation at a time to the calculation API.

    The HTTP client:
    - posts the operands of an evaluation as JSON to the operation endpoint
    - returns the parsed result on success
    - raises CalculationError with the server message (or a generic one) on failure
    - never retries, a failed call is reported immediately
    """

    # Make the Pydantic instance immutable (read-only), so the API location
    # cannot change between the time a request is built and the time it is sent.
    model_config = ConfigDict(frozen=True)

    base_url: HttpUrl = Field(default="http://localhost:8080/api/v1", description="Base URL of the calculation API")
    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")

    # Connection pool reused by every call of this client
    _session: requests.Session = PrivateAttr(default_factory=requests.Session)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "CalculationClient":
        """
        Build a client from the application settings.

        :param ClientSettings settings: Validated settings

        :return: Configured client
        :rtype: CalculationClient
        """
        return cls(base_url=settings.base_url, timeout=settings.timeout)

    @property
    def api_root(self) -> str:
        """Base URL without trailing slash."""
        return str(self.base_url).rstrip("/")

    def url_for(self, evaluation: Evaluation) -> str:
        """
        Full URL of the endpoint serving an evaluation.

        :param Evaluation evaluation: Operation to evaluate

        :return: Endpoint URL
        :rtype: str
        """
        return f"{self.api_root}{evaluation.operation.endpoint}"

    def calculate(self, evaluation: Evaluation) -> CalculationResponse:
        """
        Send an evaluation to the API and return the computed result.

        :param Evaluation evaluation: Operation and operands to send

        :return: Parsed success response
        :rtype: CalculationResponse
        :raises CalculationError: If the request fails or the API reports an error
        """
        url = self.url_for(evaluation)
        payload = evaluation.to_request().to_payload()
        logger.debug(f"📡 POST {url} {payload}")

        try:
            response = self._session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"📡❌ Calculation API unreachable: {exc}")
            raise CalculationError(str(exc)) from exc

        data = self._decode_body(response)

        if not response.ok:
            server_message = self._error_message(data)
            message = server_message or DEFAULT_ERROR_MESSAGE
            logger.warning(f"🧮❌ {evaluation.operation.value} failed with HTTP {response.status_code}: {message}")
            raise CalculationError(message, status_code=response.status_code, server_message=server_message)

        try:
            result = CalculationResponse.model_validate(data)
        except ValidationError as exc:
            logger.error(f"🧮❌ Unexpected response from {url}: {data!r}")
            raise CalculationError(DEFAULT_ERROR_MESSAGE, status_code=response.status_code) from exc

        logger.info(f"🧮✅ {evaluation.operation.value} -> {result.result}")
        return result

    def check_health(self, server_root: Optional[str] = None) -> bool:
        """
        Probe the health endpoint of the calculation server.

        The probe never raises, an unreachable server is only reported as unhealthy.

        :param str server_root: Server root URL (defaults to the base URL without /api/v1)

        :return: True if the server answered with a success status
        :rtype: bool
        """
        if server_root is None:
            server_root = self.api_root.removesuffix("/api/v1")
        url = f"{server_root.rstrip('/')}/health"

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning(f"🩺❌ Health check failed for {url}: {exc}")
            return False

        if not response.ok:
            logger.warning(f"🩺❌ Health check for {url} returned HTTP {response.status_code}")
            return False

        logger.info(f"🩺✅ Calculation API healthy at {url}")
        return True

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self._session.close()

    @staticmethod
    def _decode_body(response: requests.Response) -> Any:
        """
        Decode a JSON body, returning None when the body is not JSON.

        :param requests.Response response: HTTP response

        :return: Decoded body or None
        """
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(data: Any) -> Optional[str]:
        """
        Extract the server-supplied failure reason from an error body.

        :param data: Decoded response body

        :return: Non-empty error message or None
        :rtype: Optional[str]
        """
        if not isinstance(data, dict):
            return None
        try:
            message = ErrorResponse.model_validate(data).error
        except ValidationError:
            return None
        return message or None
