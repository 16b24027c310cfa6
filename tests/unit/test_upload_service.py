"""
Unit tests for UploadService.
"""

import pytest

from app.exceptions.upload import UploadTooLargeError


class TestReadBody:
    @pytest.mark.asyncio
    async def test_joins_chunks(self, upload_service):
        async def chunks():
            yield b"ab"
            yield b"cd"

        assert await upload_service.read_body(chunks()) == b"abcd"

    @pytest.mark.asyncio
    async def test_stops_at_first_chunk_over_limit(self, upload_service):
        consumed = []

        async def chunks():
            for i in range(10):
                consumed.append(i)
                yield b"x" * 400

        with pytest.raises(UploadTooLargeError) as exc_info:
            await upload_service.read_body(chunks())

        assert exc_info.value.details == {"max_size": 1024}
        assert consumed == [0, 1, 2]
