"""
HTTP client for the remote calculation service.

The service computes LSI, RSI, LR and an aggregate stability score from raw
measurements. One POST per user-initiated calculation; no retries here, a
failure is raised to the caller who still holds the unchanged sample and
can simply try again.

Response payloads are accepted either flat or nested under "calculation"
(the recommendations endpoint wraps them that way, with a "recommendations"
array beside it).
"""

from typing import Any, Dict, Optional
import logging

import requests
from pydantic import ValidationError

from .interfaces import CalculationService
from .schemas import CalculationRequest, CalculationResponse

logger = logging.getLogger(__name__)


class CalculationServiceError(RuntimeError):
    """Recoverable failure of the calculation service (network, HTTP, payload)"""


class HttpCalculationService(CalculationService):
    """
    Calculation service reached over HTTP/JSON.

    Usage:
        service = HttpCalculationService("https://example.org/api/", api_token="...")
        response = service.calculate(request)
        print(response.lsi, response.stability_score)
    """

    ENDPOINT = "calculate-water-analysis-with-recommendations/"

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        api_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize calculation client.

        Args:
            base_url: Service root, e.g. "http://127.0.0.1:8000/api/"
            timeout_s: Request timeout in seconds
            api_token: Optional Bearer token
            session: Optional requests.Session (shared connection pool)
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout_s = timeout_s
        self.api_token = api_token
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self.base_url + self.ENDPOINT

    def get_service_name(self) -> str:
        return "http"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def calculate(self, request: CalculationRequest) -> CalculationResponse:
        """
        POST the measurements and parse the derived indices.

        Raises:
            CalculationServiceError: On connection errors, timeouts, HTTP
                error statuses, or payloads that are not the expected JSON
        """
        payload = request.model_dump(mode="json", exclude_none=True)
        logger.info(
            f"Requesting calculation for {request.system_type.value} "
            f"(water_system={request.water_system_id}, plant={request.plant_id}) "
            f"with {sorted(request.measurements)}"
        )

        try:
            response = self._session.post(
                self.url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout_s,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            logger.error(f"Calculation service timed out after {self.timeout_s}s")
            raise CalculationServiceError(f"Calculation service timed out: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Calculation request failed: {e}")
            raise CalculationServiceError(f"Calculation request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error("Calculation service returned a non-JSON payload")
            raise CalculationServiceError(f"Invalid JSON from calculation service: {e}") from e

        return parse_calculation_payload(body)


def parse_calculation_payload(body: Any) -> CalculationResponse:
    """
    Parse a calculation service payload.

    Raises:
        CalculationServiceError: If the payload is not an object or fails
            schema validation
    """
    if not isinstance(body, dict):
        raise CalculationServiceError("Calculation service payload must be a JSON object")

    data = body.get("calculation", body)
    if not isinstance(data, dict):
        raise CalculationServiceError("'calculation' must be a JSON object")

    # The recommendations endpoint sends them beside "calculation"
    recommendations = body.get("recommendations")
    if data is not body and recommendations is not None:
        if not isinstance(recommendations, list):
            raise CalculationServiceError("'recommendations' must be a JSON array")
        data = dict(data, recommendations=recommendations)

    try:
        result = CalculationResponse.model_validate(data)
    except ValidationError as e:
        raise CalculationServiceError(f"Unexpected calculation payload: {e}") from e

    missing = [key for key in ("lsi", "rsi") if getattr(result, key) is None]
    if missing:
        logger.warning(f"Calculation response without {missing}")
    return result
