"""
Submission Builder - turns the staged capture into one analysis request
"""

import base64
import binascii
from typing import Iterable, List, Tuple

from ..models.records import AnalysisRequest, CaptureMode, StagedPage, UploadFile
from ..services.errors import SubmissionError


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split ``data:<type>;base64,<payload>`` into its media type and bytes"""
    header, sep, payload = data_url.partition(',')
    if not sep or not header.startswith('data:') or ';base64' not in header:
        raise SubmissionError("Captured page is not an encoded image")
    content_type = header[len('data:'):].split(';')[0] or 'image/jpeg'
    try:
        return content_type, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SubmissionError(f"Captured page could not be decoded: {e}")


def page_to_upload(page: StagedPage) -> UploadFile:
    """Uploaded files pass through; camera frames become ``page-<id>.jpg``"""
    if page.origin_file is not None:
        return page.origin_file
    _, content = decode_data_url(page.payload)
    return UploadFile(filename=f"page-{page.id}.jpg", content_type='image/jpeg', content=content)


def build_request(mode: CaptureMode, pages: Iterable[StagedPage], text_content: str,
                  merge: bool, folder_id: int, instruction: str) -> AnalysisRequest:
    if mode == CaptureMode.TEXT:
        return AnalysisRequest(
            folder_id=folder_id,
            mode='text',
            merge=merge,
            custom_prompt=instruction,
            text_content=text_content,
        )

    files: List[UploadFile] = [page_to_upload(page) for page in pages]
    return AnalysisRequest(
        folder_id=folder_id,
        mode='image',
        merge=merge,
        custom_prompt=instruction,
        files=files,
    )
