"""
Unit tests for app/utils/validation.py.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.utils.validation import read_upload_files, require_fields
from core.exceptions import ValidationError, MSG_FILE_TOO_LARGE, MSG_REQUIRED_FIELDS


def make_upload(filename, data, size, content_type="image/jpeg"):
    upload = MagicMock()
    upload.filename = filename
    upload.content_type = content_type
    upload.size = size
    upload.read = AsyncMock(return_value=data)
    return upload


class TestReadUploadFiles:

    def test_reads_files_in_order(self):
        files = [make_upload("a.jpg", b"aa", 2), make_upload("b.jpg", b"bbb", 3)]

        incoming = asyncio.run(read_upload_files(files, max_size=10))

        assert [(f.filename, f.data) for f in incoming] == [("a.jpg", b"aa"), ("b.jpg", b"bbb")]

    def test_absent_field(self):
        assert asyncio.run(read_upload_files(None)) == []

    def test_oversized_part_rejected_before_reading(self):
        small = make_upload("a.jpg", b"aa", 2)
        huge = make_upload("huge.jpg", b"", 11)

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(read_upload_files([small, huge], max_size=10))

        assert exc_info.value.message == MSG_FILE_TOO_LARGE
        huge.read.assert_not_called()

    def test_unknown_size_is_read(self):
        upload = make_upload("a.jpg", b"aa", None)

        incoming = asyncio.run(read_upload_files([upload], max_size=1))

        assert incoming[0].data == b"aa"

    def test_read_failure(self):
        upload = make_upload("a.jpg", b"", 2)
        upload.read.side_effect = OSError("disk gone")

        with pytest.raises(ValidationError):
            asyncio.run(read_upload_files([upload]))


class TestRequireFields:

    def test_blank_string_counts_as_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            require_fields({"event_id": 1, "user_id": "  "}, "event_id", "user_id")

        assert exc_info.value.message == MSG_REQUIRED_FIELDS
        assert "user_id" in exc_info.value.details

    def test_zero_is_present(self):
        require_fields({"event_id": 0}, "event_id")
