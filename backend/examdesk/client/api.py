"""Async HTTP client for the exam API."""

import logging
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from examdesk.client.normalize import normalize_exam_list
from examdesk.config import get_settings
from examdesk.schemas.exams import ExamCriteria, ExamStatusResponse
from examdesk.schemas.sessions import ExamSession

logger = logging.getLogger(__name__)


class ExamClientError(Exception):
    """Base error for exam API calls."""


class ExamTransportError(ExamClientError):
    """The request failed: network error, timeout, bad response or unexpected status."""


class ExamNotFoundError(ExamClientError):
    """The API reported that the exam does not exist."""

    def __init__(self, exam_id: int) -> None:
        self.exam_id = exam_id
        super().__init__(f"Exam {exam_id} not found")


class ExamApiClient:
    """
    Client for GET /exams and PUT /exams/{id}/status.

    Requests time out after `timeout` seconds. Failures are never retried;
    callers decide whether to fetch again.

    Use as an async context manager, or pass an existing httpx.AsyncClient
    (which the caller then owns).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.api_timeout_seconds,
        )

    async def __aenter__(self) -> "ExamApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ExamTransportError(f"{method} {url} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ExamTransportError(
                f"{e.request.method} {e.request.url} returned {response.status_code}"
            ) from e
        except ValueError as e:
            raise ExamTransportError(f"Invalid JSON from {response.request.url}") from e

    async def list_exams(self, criteria: ExamCriteria | None = None) -> list[ExamSession]:
        """Fetch and normalize the exam list."""
        params = criteria.to_query_params() if criteria is not None else {}
        response = await self._request("GET", "/exams", params=params)
        data = self._json(response)
        if not isinstance(data, list):
            raise ExamTransportError(f"Expected a list of exams, got {type(data).__name__}")
        logger.debug("Fetched %d exams", len(data))
        return normalize_exam_list(data)

    async def update_status(self, exam_id: int, status: str | None = None) -> ExamStatusResponse:
        """
        Advance an exam's status, or set it explicitly.

        Raises ExamNotFoundError when the exam does not exist.
        """
        kwargs: dict[str, Any] = {}
        if status is not None:
            kwargs["json"] = {"status": status}
        response = await self._request("PUT", f"/exams/{exam_id}/status", **kwargs)
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ExamNotFoundError(exam_id)
        data = self._json(response)
        try:
            return ExamStatusResponse.model_validate(data)
        except ValidationError as e:
            raise ExamTransportError(f"Unexpected status response for exam {exam_id}") from e
