"""
Tests for building analysis requests from staged input.
"""

import base64

import pytest

from neuranote.capture.page_store import to_data_url
from neuranote.capture.submission import build_request, decode_data_url, page_to_upload
from neuranote.models.records import CaptureMode, SourceKind, StagedPage, UploadFile
from neuranote.services.errors import SubmissionError

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


def camera_page(page_id="webcam-1"):
    return StagedPage(id=page_id, source_kind=SourceKind.IMAGE, payload=to_data_url(JPEG_BYTES, "image/jpeg"))


def file_page():
    upload = UploadFile(filename="menu.png", content_type="image/png", content=b"\x89PNG")
    return StagedPage(id="file-1", source_kind=SourceKind.IMAGE,
                      payload=to_data_url(upload.content, upload.content_type), origin_file=upload)


class TestDecodeDataUrl:
    """Tests for data URL decoding."""

    def test_decode(self):
        payload = base64.b64encode(b"abc").decode()
        assert decode_data_url(f"data:image/png;base64,{payload}") == ("image/png", b"abc")

    @pytest.mark.parametrize("value", ["not a data url", "data:image/png,plain", "data:image/png;base64,@@@"])
    def test_invalid(self, value):
        with pytest.raises(SubmissionError):
            decode_data_url(value)


class TestPageToUpload:
    """Tests for page normalization."""

    def test_uploaded_file_passes_through(self):
        page = file_page()
        assert page_to_upload(page) is page.origin_file

    def test_camera_frame_becomes_jpeg_file(self):
        upload = page_to_upload(camera_page("webcam-42"))

        assert upload.filename == "page-webcam-42.jpg"
        assert upload.content_type == "image/jpeg"
        assert upload.content == JPEG_BYTES


class TestBuildRequest:
    """Tests for build_request."""

    def test_text_mode_carries_no_files(self):
        request = build_request(CaptureMode.TEXT, [camera_page()], "Met with Acme", False, 3, "Standard Meeting: ")

        assert request.mode == "text"
        assert request.text_content == "Met with Acme"
        assert request.files == []
        assert request.folder_id == 3
        assert request.custom_prompt == "Standard Meeting: "

    def test_mixed_pages_give_homogeneous_files(self):
        request = build_request(CaptureMode.UPLOAD, [file_page(), camera_page()], "", True, 9, "Visitor Report: x")

        assert request.mode == "image"
        assert request.merge is True
        assert request.text_content is None
        assert [f.filename for f in request.files] == ["menu.png", "page-webcam-1.jpg"]
        assert all(isinstance(f, UploadFile) for f in request.files)

    def test_webcam_mode_uses_image(self):
        request = build_request(CaptureMode.WEBCAM, [camera_page()], "", False, 1, "")
        assert request.mode == "image"
        assert len(request.files) == 1
