"""Unit tests for Rows and Row."""

import pytest

from platform_common.db.errors import NotFoundError
from platform_common.db.rows import Row, Rows
from platform_common.tests.fixtures.doubles import FakeCursor


class CloseRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, error):
        self.calls.append(error)


class TestRows:

    @pytest.mark.asyncio
    async def test_iterates_in_batches(self):
        cursor = FakeCursor([{"id": i} for i in range(5)])
        rows = Rows(cursor, prefetch=2)

        result = [r["id"] async for r in rows]

        assert result == [0, 1, 2, 3, 4]
        assert cursor.fetch_sizes == [2, 2, 2]
        assert rows.closed

    @pytest.mark.asyncio
    async def test_closes_once_when_exhausted(self):
        on_close = CloseRecorder()
        rows = Rows(FakeCursor([{"id": 1}, {"id": 2}]), prefetch=2, on_close=on_close)

        assert [r async for r in rows] == [{"id": 1}, {"id": 2}]
        await rows.close()

        assert on_close.calls == [None]

    @pytest.mark.asyncio
    async def test_empty_result(self):
        on_close = CloseRecorder()
        rows = Rows(FakeCursor([]), on_close=on_close)

        assert [r async for r in rows] == []
        assert on_close.calls == [None]

    @pytest.mark.asyncio
    async def test_fetch_error_closes_with_error(self):
        error = RuntimeError("connection lost")
        on_close = CloseRecorder()
        rows = Rows(FakeCursor([], error=error), on_close=on_close)

        with pytest.raises(RuntimeError) as exc_info:
            async for _ in rows:
                pass

        assert exc_info.value is error
        assert on_close.calls == [error]

    @pytest.mark.asyncio
    async def test_context_manager_closes_early(self):
        on_close = CloseRecorder()

        async with Rows(FakeCursor([{"id": i} for i in range(10)]), prefetch=3, on_close=on_close) as rows:
            first = await rows.__anext__()

        assert first == {"id": 0}
        assert rows.closed
        assert on_close.calls == [None]

    @pytest.mark.asyncio
    async def test_iteration_after_close_stops(self):
        rows = Rows(FakeCursor([{"id": 1}]))
        await rows.close()

        assert [r async for r in rows] == []

    @pytest.mark.asyncio
    async def test_scan_all(self):
        rows = Rows(FakeCursor([{"n": 1}, {"n": 2}]))

        assert await rows.scan_all(int) == [1, 2]
        assert rows.closed

    def test_prefetch_must_be_positive(self):
        with pytest.raises(ValueError):
            Rows(FakeCursor([]), prefetch=0)


class TestRow:

    def test_scan(self):
        assert Row({"id": 1}).scan(dict) == {"id": 1}

    def test_no_row(self):
        with pytest.raises(NotFoundError):
            Row(None).scan(dict)

    def test_error_surfaces_on_scan(self):
        error = OSError("network down")
        row = Row(error=error)

        assert row.error is error
        with pytest.raises(OSError) as exc_info:
            row.scan(dict)
        assert exc_info.value is error
