"""Tests for HttpTransport and LibraryApi against a mocked HTTP server.

Covers envelope unwrapping, the transport/application error split and the
request shapes of each endpoint.
"""

import json

import httpx
import pytest
import respx

from libraryview.api.library import LibraryApi
from libraryview.api.transport import HttpTransport
from libraryview.errors import ApplicationError, TransportError
from libraryview.models.library import (
    IdentifyRequest,
    LibraryKind,
    LibraryQuery,
    SortKey,
    SortOrder,
)
from libraryview.settings import Settings
from tests.helpers.fake_transport import envelope, make_item

BASE = "http://library.test"


@pytest.fixture
def api() -> LibraryApi:
    return LibraryApi(HttpTransport.from_settings(Settings(server_url=BASE)))


@pytest.mark.asyncio
class TestLibraryApi:
    """Endpoint behaviour through the real httpx transport."""

    async def test_list_movies_sends_query(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        route = respx_mock.get(f"{BASE}/api/library/movies").mock(
            return_value=httpx.Response(
                200,
                json=envelope({"items": [make_item(7, "Dune")], "total": 1}),
            )
        )
        query = LibraryQuery(sort=SortKey.TITLE, order=SortOrder.ASC, search="dune")

        page = await api.list_movies(query)

        sent = route.calls.last.request.url.params
        assert dict(sent) == {"sort": "title", "order": "asc", "search": "dune"}
        assert page.total == 1
        assert page.items[0].title == "Dune"
        assert page.items[0].metadata is None

    async def test_list_dispatches_by_kind(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library/tv").mock(
            return_value=httpx.Response(200, json=envelope({"items": [], "total": 0}))
        )
        page = await api.list_items(LibraryKind.TV)
        assert page.items == []
        assert (await api.list_tv()).total == 0

    async def test_get_item_with_metadata(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library/items/7").mock(
            return_value=httpx.Response(
                200,
                json=envelope(
                    make_item(
                        7,
                        "Dune",
                        metadata={
                            "tmdb_id": 438631,
                            "release_date": "2021-09-15",
                            "runtime": 155,
                            "poster_path": "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg",
                            "genres": '["Science Fiction", "Adventure"]',
                        },
                    )
                ),
            )
        )

        item = await api.get_item(7)

        assert item.is_identified
        assert item.metadata is not None
        assert item.metadata.year == 2021
        assert item.metadata.genre_list == ["Science Fiction", "Adventure"]

    async def test_error_envelope_with_http_error_status(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library/items/9").mock(
            return_value=httpx.Response(
                404, json=envelope(code=404, message="Media item with ID 9 not found")
            )
        )
        with pytest.raises(ApplicationError) as excinfo:
            await api.get_item(9)
        assert excinfo.value.code == 404
        assert "not found" in excinfo.value.message

    async def test_error_code_inside_http_200(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.post(f"{BASE}/api/library/items/3/refresh").mock(
            return_value=httpx.Response(
                200, json=envelope(code=500, message="Failed to refresh metadata")
            )
        )
        with pytest.raises(ApplicationError) as excinfo:
            await api.refresh_metadata(3)
        assert excinfo.value.code == 500

    async def test_non_json_body_is_transport_error(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library").mock(
            return_value=httpx.Response(502, text="<html>Bad Gateway</html>")
        )
        with pytest.raises(TransportError) as excinfo:
            await api.list_all()
        assert excinfo.value.status_code == 502

    async def test_network_failure_is_transport_error(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        with pytest.raises(TransportError):
            await api.list_all()

    async def test_metadata_for_other_item_is_rejected(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        item = make_item(7, "Dune", metadata={})
        item["metadata"]["media_item_id"] = 8
        respx_mock.get(f"{BASE}/api/library/items/7").mock(
            return_value=httpx.Response(200, json=envelope(item))
        )
        with pytest.raises(ApplicationError):
            await api.get_item(7)

    async def test_refresh_returns_status(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.post(f"{BASE}/api/library/items/3/refresh").mock(
            return_value=httpx.Response(200, json=envelope("Metadata updated"))
        )
        assert await api.refresh_metadata(3) == "Metadata updated"

    async def test_batch_refresh_posts_ids(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        route = respx_mock.post(f"{BASE}/api/library/batch/refresh").mock(
            return_value=httpx.Response(
                200,
                json=envelope(
                    {"success": [1, 3], "failed": [{"id": 2, "error": "not found"}]}
                ),
            )
        )

        response = await api.batch_refresh([1, 2, 3])

        assert json.loads(route.calls.last.request.content) == {"ids": [1, 2, 3]}
        assert response.success == [1, 3]
        assert response.failed[0].error == "not found"

    async def test_candidates_and_identify(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library/items/7/candidates").mock(
            return_value=httpx.Response(
                200,
                json=envelope(
                    [
                        {
                            "id": "438631",
                            "title": "Dune",
                            "year": 2021,
                            "media_type": "movie",
                            "provider": "tmdb",
                        }
                    ],
                    message="Found 1 candidates",
                ),
            )
        )
        identify_route = respx_mock.post(f"{BASE}/api/library/items/7/identify").mock(
            return_value=httpx.Response(200, json=envelope("Identified as: Dune"))
        )

        candidates = await api.get_candidates(7)
        status = await api.identify_item(7, IdentifyRequest.from_candidate(candidates[0]))

        assert status == "Identified as: Dune"
        body = json.loads(identify_route.calls.last.request.content)
        assert body == {"provider": "tmdb", "provider_id": "438631", "type": "movie"}

    async def test_candidates_without_data_are_empty(
        self, api: LibraryApi, respx_mock: respx.MockRouter
    ) -> None:
        respx_mock.get(f"{BASE}/api/library/items/7/candidates").mock(
            return_value=httpx.Response(200, json=envelope(message="Found 0 candidates"))
        )
        assert await api.get_candidates(7) == []
