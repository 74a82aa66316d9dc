"""Tests for the shard transports."""

import httpx
import pytest

from doxsearch.config import Settings
from doxsearch.engine.index.transport import (
    DirectoryShardFetcher,
    HttpShardFetcher,
    MemoryShardFetcher,
    ShardFetcher,
    build_fetcher,
)
from doxsearch.errors import ShardLoadFailed, ShardNotFound
from doxsearch.models.enums import ShardNaming

from conftest import R_SHARD_JS


class TestDirectoryShardFetcher:

    @pytest.mark.asyncio
    async def test_reads_generator_filename(self, tmp_path):
        (tmp_path / "enumvalues_72.js").write_text(R_SHARD_JS)
        fetcher = DirectoryShardFetcher(tmp_path, category="enumvalues")
        assert await fetcher.fetch_shard("r") == R_SHARD_JS.encode()

    @pytest.mark.asyncio
    async def test_reads_json_filename(self, tmp_path):
        (tmp_path / "s.json").write_text("{}")
        fetcher = DirectoryShardFetcher(tmp_path, naming=ShardNaming.JSON)
        assert await fetcher.fetch_shard("s") == b"{}"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        fetcher = DirectoryShardFetcher(tmp_path)
        with pytest.raises(ShardNotFound):
            await fetcher.fetch_shard("q")

    @pytest.mark.asyncio
    async def test_unreadable_path(self, tmp_path):
        (tmp_path / "all_72.js").mkdir()
        fetcher = DirectoryShardFetcher(tmp_path)
        with pytest.raises(ShardLoadFailed):
            await fetcher.fetch_shard("r")


def _http_fetcher(handler, **kwargs) -> HttpShardFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpShardFetcher("https://docs.example.org/search", client=client, **kwargs)


class TestHttpShardFetcher:

    @pytest.mark.asyncio
    async def test_fetches_shard_url(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text=R_SHARD_JS)

        fetcher = _http_fetcher(handler, category="enumvalues")
        assert await fetcher.fetch_shard("r") == R_SHARD_JS.encode()
        assert requested == ["https://docs.example.org/search/enumvalues_72.js"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 410])
    async def test_not_found(self, status):
        fetcher = _http_fetcher(lambda request: httpx.Response(status))
        with pytest.raises(ShardNotFound):
            await fetcher.fetch_shard("q")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [500, 503, 403])
    async def test_server_error_is_load_failure(self, status):
        fetcher = _http_fetcher(lambda request: httpx.Response(status))
        with pytest.raises(ShardLoadFailed, match=str(status)):
            await fetcher.fetch_shard("r")

    @pytest.mark.asyncio
    async def test_connection_error_is_load_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        fetcher = _http_fetcher(handler)
        with pytest.raises(ShardLoadFailed) as excinfo:
            await fetcher.fetch_shard("r")
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_is_load_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        fetcher = _http_fetcher(handler)
        with pytest.raises(ShardLoadFailed, match="timed out"):
            await fetcher.fetch_shard("r")

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with HttpShardFetcher("https://docs.example.org", client=client):
            pass
        assert not client.is_closed
        await client.aclose()


class TestMemoryShardFetcher:

    @pytest.mark.asyncio
    async def test_str_and_bytes(self):
        fetcher = MemoryShardFetcher({"r": "abc", "s": b"def"})
        assert await fetcher.fetch_shard("r") == b"abc"
        assert await fetcher.fetch_shard("s") == b"def"

    @pytest.mark.asyncio
    async def test_missing(self):
        with pytest.raises(ShardNotFound):
            await MemoryShardFetcher({}).fetch_shard("r")

    def test_satisfies_protocol(self):
        assert isinstance(MemoryShardFetcher({}), ShardFetcher)


class TestBuildFetcher:

    def test_directory_by_default(self, tmp_path):
        fetcher = build_fetcher(Settings(index_path=tmp_path, index_category="functions"))
        assert isinstance(fetcher, DirectoryShardFetcher)
        assert fetcher.path_for("r") == tmp_path / "functions_72.js"

    @pytest.mark.asyncio
    async def test_url_takes_precedence(self, tmp_path):
        fetcher = build_fetcher(Settings(index_path=tmp_path, index_url="https://docs.example.org/search/"))
        assert isinstance(fetcher, HttpShardFetcher)
        assert fetcher.url_for("r") == "https://docs.example.org/search/all_72.js"
        await fetcher.aclose()
