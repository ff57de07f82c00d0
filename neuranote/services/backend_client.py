"""
Backend client for communication with the NeuraNote analysis service
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from dataclasses import dataclass

import aiofiles
import aiohttp

from ..config.settings import BackendConfig
from ..models.records import AnalysisRequest, Folder, Note, UserProfile


@dataclass
class APIResponse:
    """Represents an API response"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


def unwrap_list(payload: Any, key: str) -> List[Dict[str, Any]]:
    """Accept either a bare array or an envelope ``{key: [...]}``"""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        items = payload.get(key) or []
        if isinstance(items, list):
            return items
    raise ValueError(f"Unexpected response shape for '{key}': {type(payload).__name__}")


def unwrap_created_id(payload: Any) -> Optional[int]:
    """Extract the id of a created resource, top-level or nested under ``data``"""
    if not isinstance(payload, dict):
        return None
    created_id = payload.get('id')
    if created_id is None and isinstance(payload.get('data'), dict):
        created_id = payload['data'].get('id')
    return int(created_id) if created_id is not None else None


def _error_message(data: Any, status: int) -> str:
    if isinstance(data, dict):
        detail = data.get('detail') or data.get('error')
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return f"HTTP {status}"


class BackendClient:
    """Client for communicating with the analysis backend"""

    def __init__(self, config: Optional[BackendConfig] = None):
        self.config = config or BackendConfig()
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(__name__)

    @property
    def connected(self) -> bool:
        return self.session is not None and not self.session.closed

    async def connect(self):
        """Open the HTTP session used for all requests"""
        if self.connected:
            return
        self.logger.info(f"Connecting to backend at {self.config.base_url}")
        timeout = aiohttp.ClientTimeout(total=self.config.api_timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)

    async def disconnect(self):
        """Close the HTTP session"""
        if self.session:
            self.logger.info("Disconnecting from backend service")
            await self.session.close()
            self.session = None

    # HTTP API methods
    async def get(self, endpoint: str, params: Optional[Dict] = None) -> APIResponse:
        """Make GET request"""
        return await self._request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Optional[Dict] = None, **kwargs) -> APIResponse:
        """Make POST request"""
        return await self._request("POST", endpoint, json=data, **kwargs)

    async def patch(self, endpoint: str, data: Optional[Dict] = None) -> APIResponse:
        """Make PATCH request"""
        return await self._request("PATCH", endpoint, json=data)

    async def delete(self, endpoint: str) -> APIResponse:
        """Make DELETE request"""
        return await self._request("DELETE", endpoint)

    async def _request(self, method: str, endpoint: str, raw: bool = False,
                       label: str = "Request", **kwargs) -> APIResponse:
        """Make HTTP request. With ``raw`` the body is returned as bytes.

        ``label`` names the call in errors that carry no text of their own,
        such as timeouts.
        """
        if not self.session:
            return APIResponse(success=False, error="Not connected")

        url = f"{self.config.base_url}{endpoint}"

        try:
            async with self.session.request(method, url, **kwargs) as response:
                if raw and response.status < 400:
                    data = await response.read()
                elif response.content_type == 'application/json':
                    data = await response.json()
                else:
                    data = await response.text()

                if response.status < 400:
                    return APIResponse(success=True, data=data, status_code=response.status)
                else:
                    return APIResponse(success=False, error=_error_message(data, response.status),
                                       status_code=response.status)

        except asyncio.TimeoutError:
            # also raised as aiohttp.ServerTimeoutError
            self.logger.error(f"Request timed out: {method} {url}")
            return APIResponse(success=False, error=f"{label} timed out")
        except Exception as e:
            self.logger.error(f"Request failed: {method} {url} - {e!r}")
            return APIResponse(success=False, error=str(e) or f"{label} failed")

    def _normalized(self, response: APIResponse, convert) -> APIResponse:
        """Apply a shape adapter to a successful response"""
        if not response.success:
            return response
        try:
            return APIResponse(success=True, data=convert(response.data), status_code=response.status_code)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Malformed backend response: {e}")
            return APIResponse(success=False, error=f"Malformed response: {e}", status_code=response.status_code)

    # User
    async def get_user(self) -> APIResponse:
        """Get the signed-in user"""
        response = await self.get("/user")
        return self._normalized(response, lambda data: UserProfile(username=data['username']))

    # Folders
    async def list_folders(self) -> APIResponse:
        """List all folders"""
        response = await self.get("/folders")
        return self._normalized(
            response, lambda data: [Folder.from_dict(item) for item in unwrap_list(data, 'folders')]
        )

    async def create_folder(self, name: str, color: str) -> APIResponse:
        """Create a folder; ``data`` is the new folder id"""
        response = await self.post("/folders", {'name': name, 'color': color})
        response = self._normalized(response, unwrap_created_id)
        if response.success and response.data is None:
            return APIResponse(success=False, error="Could not create folder", status_code=response.status_code)
        return response

    async def delete_folder(self, folder_id: int) -> APIResponse:
        """Delete a folder and its notes"""
        return await self.delete(f"/folders/{folder_id}")

    async def set_favorite(self, folder_id: int, is_favorite: bool) -> APIResponse:
        """Mark or unmark a folder as favorite"""
        return await self.patch(f"/folders/{folder_id}/favorite", {'is_favorite': is_favorite})

    # Notes
    async def list_notes(self, folder_id: int) -> APIResponse:
        """List notes of one folder"""
        response = await self.get(f"/notes/{folder_id}")
        return self._normalized(
            response, lambda data: [Note.from_dict(item) for item in unwrap_list(data, 'notes')]
        )

    async def delete_note(self, note_id: int) -> APIResponse:
        """Delete a single note"""
        return await self.delete(f"/notes/{note_id}")

    # Prompts
    async def get_prompts(self) -> APIResponse:
        """Get saved prompts as a name -> content mapping"""
        response = await self.get("/prompts")
        return self._normalized(response, lambda data: {str(k): str(v) for k, v in dict(data).items()})

    async def create_prompt(self, name: str, content: str) -> APIResponse:
        """Persist a named prompt"""
        return await self.post("/prompts", {'name': name, 'content': content})

    async def import_prompts(self, file_path: Union[str, Path]) -> APIResponse:
        """Upload a spreadsheet and get back the prompts it contains"""
        file_path = Path(file_path)
        try:
            async with aiofiles.open(file_path, 'rb') as f:
                file_data = await f.read()
        except OSError as e:
            self.logger.error(f"Failed to read prompt sheet {file_path}: {e}")
            return APIResponse(success=False, error=str(e))

        data = aiohttp.FormData()
        data.add_field('file', file_data, filename=file_path.name,
                       content_type='application/octet-stream')
        response = await self._request("POST", "/import_prompts", data=data)

        def convert(payload):
            prompts = payload.get('prompts', payload) if isinstance(payload, dict) else payload
            return {str(k): str(v) for k, v in dict(prompts).items()}

        return self._normalized(response, convert)

    # Analysis
    async def analyze(self, request: AnalysisRequest) -> APIResponse:
        """Submit a capture for analysis, using the long analysis timeout"""
        data = aiohttp.FormData()
        data.add_field('folder_id', str(request.folder_id))
        data.add_field('mode', request.mode)
        data.add_field('merge', str(request.merge).lower())
        if request.text_content:
            data.add_field('text_content', request.text_content)
        if request.custom_prompt:
            data.add_field('custom_prompt', request.custom_prompt)
        for upload in request.files:
            data.add_field('files', upload.content, filename=upload.filename,
                           content_type=upload.content_type)

        self.logger.info(f"Submitting analysis: folder={request.folder_id} mode={request.mode} "
                         f"files={len(request.files)} merge={request.merge}")
        timeout = aiohttp.ClientTimeout(total=self.config.analyze_timeout)
        response = await self._request("POST", "/analyze", data=data, timeout=timeout,
                                       label="Analysis")

        def convert(payload):
            try:
                return Note.from_dict(payload)
            except (KeyError, TypeError, ValueError):
                return payload

        return self._normalized(response, convert)

    # Exports
    async def generate_pdf(self, note_id: int) -> APIResponse:
        """Render a note as PDF; ``data`` is the file content"""
        return await self.post("/generate_pdf", {'note_id': note_id}, raw=True)

    async def generate_csv(self, note_data: Dict[str, Any]) -> APIResponse:
        """Render note data as CSV; ``data`` is the file content"""
        return await self.post("/generate_csv", note_data, raw=True)

    async def send_email(self, note_id: int, mode: str = "text") -> APIResponse:
        """Open a mail draft for a note, as plain text or with the PDF attached"""
        return await self.post("/send_email", {'note_id': note_id, 'mode': mode})
