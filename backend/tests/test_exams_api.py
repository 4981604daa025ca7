"""Tests for GET /exams and PUT /exams/{id}/status."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from examdesk import config
from examdesk.client.api import ExamApiClient
from examdesk.config import Settings, get_settings
from examdesk.db.session import get_db
from examdesk.domain.status import ExamStatus
from examdesk.main import app
from examdesk.schemas.exams import ExamCriteria


async def titles(client: AsyncClient, **params: str) -> list[str]:
    response = await client.get("/exams", params=params)
    assert response.status_code == 200
    return [exam["title"] for exam in response.json()]


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestListExams:
    async def test_empty_database(self, client: AsyncClient) -> None:
        response = await client.get("/exams")
        assert response.status_code == 200
        assert response.json() == []

    async def test_ordered_by_datetime_ascending(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        assert await titles(client) == ["English C1", "Spanish A2", "French B2", "German B1"]

    async def test_record_shape(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.get("/exams", params={"language": "FR"})
        [exam] = response.json()

        assert exam["id"] == seeded_exams["French B2"]
        assert exam["status"] == "Pending"
        assert exam["datetime"].startswith("2025-01-12T10:00:00")
        assert exam["country"] == "France"
        assert exam["latitude"] == pytest.approx(48.8566)
        assert [c["name"] for c in exam["candidates"]] == ["Jo", "Amélie"]

    async def test_missing_location_is_null(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.get("/exams", params={"language": "DE"})
        [exam] = response.json()
        assert exam["country"] is None
        assert exam["latitude"] is None
        assert exam["status"] == "Weird"

    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({"status": "Started"}, ["English C1"]),
            ({"country": "Spain"}, ["Spanish A2"]),
            ({"language": "EN"}, ["English C1"]),
            ({"date": "2025-01-10"}, ["English C1", "Spanish A2"]),
            ({"candidate": "jo"}, ["French B2", "German B1"]),
            ({"candidate": "SAM"}, ["English C1"]),
            ({"status": "Pending", "candidate": "Jo"}, ["French B2"]),
            ({"date": "2025-01-10", "status": "Pending"}, []),
            ({"country": "france"}, []),
        ],
    )
    async def test_filters(
        self,
        client: AsyncClient,
        seeded_exams: dict[str, int],
        params: dict[str, str],
        expected: list[str],
    ) -> None:
        assert await titles(client, **params) == expected

    async def test_blank_filters_are_ignored(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        assert len(await titles(client, status="", date="", candidate="  ")) == 4

    async def test_candidate_filter_escapes_wildcards(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        assert await titles(client, candidate="%") == []

    async def test_invalid_date_rejected(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.get("/exams", params={"date": "10/01/2025"})
        assert response.status_code == 422


class TestUpdateStatus:
    async def test_auto_advance_until_finished(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        exam_id = seeded_exams["French B2"]

        seen = []
        for _ in range(3):
            response = await client.put(f"/exams/{exam_id}/status")
            assert response.status_code == 200
            seen.append(response.json()["status"])

        assert seen == ["Started", "Finished", "Finished"]
        assert await titles(client, status="Finished") == ["Spanish A2", "French B2"]

    async def test_response_body(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        exam_id = seeded_exams["English C1"]
        response = await client.put(f"/exams/{exam_id}/status")
        assert response.json() == {"id": exam_id, "status": "Finished", "message": "Exam status updated."}

    async def test_unknown_stored_status_advances_to_finished(
        self, client: AsyncClient, seeded_exams: dict[str, int]
    ) -> None:
        response = await client.put(f"/exams/{seeded_exams['German B1']}/status")
        assert response.json()["status"] == "Finished"

    async def test_blank_status_auto_advances(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.put(f"/exams/{seeded_exams['French B2']}/status", json={"status": "  "})
        assert response.status_code == 200
        assert response.json()["status"] == "Started"

    async def test_explicit_status(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.put(f"/exams/{seeded_exams['French B2']}/status", json={"status": "Finished"})
        assert response.status_code == 200
        assert response.json()["status"] == "Finished"

    async def test_explicit_unknown_status_rejected(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.put(f"/exams/{seeded_exams['French B2']}/status", json={"status": "Paused"})

        assert response.status_code == 422
        assert "Paused" in response.json()["detail"]
        assert await titles(client, status="Pending") == ["French B2"]

    async def test_explicit_status_stored_verbatim_with_override(
        self, client: AsyncClient, seeded_exams: dict[str, int]
    ) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(allow_status_override=True)

        response = await client.put(f"/exams/{seeded_exams['French B2']}/status", json={"status": "Paused"})

        assert response.status_code == 200
        assert response.json()["status"] == "Paused"
        assert await titles(client, status="Paused") == ["French B2"]

    async def test_override_body_not_stripped(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(allow_status_override=True)

        response = await client.put(f"/exams/{seeded_exams['French B2']}/status", json={"status": " On hold "})

        assert response.json()["status"] == " On hold "

    async def test_explicit_status_with_padding(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.put(f"/exams/{seeded_exams['French B2']}/status", json={"status": " Started "})

        assert response.status_code == 200
        assert response.json()["status"] == "Started"

    async def test_missing_exam(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        response = await client.put("/exams/999/status")
        assert response.status_code == 404
        assert response.json()["detail"] == "Exam not found"

    async def test_other_exams_untouched(self, client: AsyncClient, seeded_exams: dict[str, int]) -> None:
        await client.put(f"/exams/{seeded_exams['French B2']}/status")
        response = await client.get("/exams")
        statuses = {e["title"]: e["status"] for e in response.json()}
        assert statuses == {
            "English C1": "Started",
            "Spanish A2": "Finished",
            "French B2": "Started",
            "German B1": "Weird",
        }


class TestApiClientAgainstApp:
    """The front-end client talking to the real routes."""

    @pytest.fixture
    async def api(self, client: AsyncClient) -> AsyncGenerator[ExamApiClient, None]:
        # `client` installs the database override on the app
        http = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        yield ExamApiClient(http_client=http)
        await http.aclose()

    async def test_list_is_normalized(self, api: ExamApiClient, seeded_exams: dict[str, int]) -> None:
        sessions = await api.list_exams()

        german = sessions[-1]
        assert german.title == "German B1"
        assert german.status is ExamStatus.PENDING
        assert german.location.country == "Unknown location"
        assert (german.location.latitude, german.location.longitude) == (0.0, 0.0)
        assert german.candidates == ("Jo",)

    async def test_advance_round_trip(self, api: ExamApiClient, seeded_exams: dict[str, int]) -> None:
        exam_id = seeded_exams["English C1"]
        result = await api.update_status(exam_id)
        assert result.status == "Finished"

        [session] = await api.list_exams(ExamCriteria(language="EN"))
        assert session.status is ExamStatus.FINISHED


class TestDatabaseFailure:
    class BrokenSession:
        async def execute(self, *args: object, **kwargs: object) -> None:
            raise OperationalError("SELECT", {}, Exception("database is down"))

        async def get(self, *args: object, **kwargs: object) -> None:
            raise OperationalError("SELECT", {}, Exception("database is down"))

    @pytest.fixture
    def broken_db(self, client: AsyncClient) -> None:
        async def override_get_db() -> AsyncGenerator[object, None]:
            yield self.BrokenSession()

        app.dependency_overrides[get_db] = override_get_db

    async def test_list(self, client: AsyncClient, broken_db: None) -> None:
        response = await client.get("/exams")
        assert response.status_code == 500

    async def test_update(self, client: AsyncClient, broken_db: None) -> None:
        response = await client.put("/exams/1/status")
        assert response.status_code == 500

    async def test_details_hidden_outside_development(
        self, client: AsyncClient, broken_db: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(config, "get_settings", lambda: Settings(environment="production"))

        response = await client.get("/exams")

        assert response.json()["detail"] == "Unable to load exam sessions."
