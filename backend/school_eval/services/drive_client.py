"""
Google Drive client for remote evidence storage.

Authenticates as a service account (GOOGLE_CLIENT_EMAIL / GOOGLE_PRIVATE_KEY)
through google-auth and talks to the Drive v3 REST API with httpx.
"""

import asyncio
import json
import uuid
from typing import Optional, Dict, Any

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import service_account

from school_eval.core.logging_config import logger


class DriveAPIError(Exception):
    """Drive rejected a request or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DriveFileNotFoundError(DriveAPIError):
    """Drive reports the file as already absent"""


class GoogleDriveClient:
    """Minimal async Drive v3 client: create file, grant permission, delete file."""

    DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]
    TOKEN_URI = "https://oauth2.googleapis.com/token"
    UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
    FILES_URL = "https://www.googleapis.com/drive/v3/files"

    def __init__(
        self,
        client_email: str,
        private_key: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_email = client_email
        self._private_key = private_key
        self.timeout = timeout
        self._transport = transport
        self._credentials: Optional[service_account.Credentials] = None

    def _get_credentials(self) -> service_account.Credentials:
        """Lazily build service-account credentials"""
        if self._credentials is None:
            try:
                self._credentials = service_account.Credentials.from_service_account_info(
                    {
                        "type": "service_account",
                        "client_email": self.client_email,
                        "private_key": self._private_key,
                        "token_uri": self.TOKEN_URI,
                    },
                    scopes=self.DRIVE_SCOPES,
                )
            except (ValueError, GoogleAuthError) as e:
                raise DriveAPIError(f"Invalid service account credentials: {e}")
        return self._credentials

    async def _access_token(self) -> str:
        credentials = self._get_credentials()
        if not credentials.valid:
            try:
                # google-auth refresh is blocking
                await asyncio.to_thread(credentials.refresh, google_requests.Request())
            except GoogleAuthError as e:
                raise DriveAPIError(f"Failed to obtain Drive access token: {e}")
        return credentials.token

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        token = await self._access_token()
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {token}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise DriveAPIError(f"Drive request failed: {type(e).__name__}: {e}")

        if response.status_code == 404:
            raise DriveFileNotFoundError("Drive file not found", status_code=404)
        if response.status_code >= 400:
            raise DriveAPIError(
                f"Drive returned {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        """Decoded JSON object body of a successful Drive reply"""
        try:
            data = response.json()
        except ValueError:
            raise DriveAPIError(
                f"Drive returned a non-JSON response: {response.text[:200]}",
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise DriveAPIError("Drive returned an unexpected response body", status_code=response.status_code)
        return data

    async def create_file(
        self,
        name: str,
        parent_folder_id: str,
        mime_type: str,
        content: bytes,
    ) -> Dict[str, Any]:
        """
        Upload a file with a multipart request.

        Returns:
            Dict with id and webViewLink as returned by Drive
        """
        boundary = f"school-eval-{uuid.uuid4().hex}"
        metadata = json.dumps({
            "name": name,
            "parents": [parent_folder_id],
            "mimeType": mime_type,
        })
        body = (
            f"--{boundary}\r\n"
            f"Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{metadata}\r\n"
            f"--{boundary}\r\n"
            f"Content-Type: {mime_type}\r\n\r\n"
        ).encode("utf-8") + content + f"\r\n--{boundary}--\r\n".encode("utf-8")

        response = await self._request(
            "POST",
            self.UPLOAD_URL,
            params={
                "uploadType": "multipart",
                "fields": "id, webViewLink",
                "supportsAllDrives": "true",
            },
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            content=body,
        )
        data = self._json(response)
        logger.info(f"[Drive] Created file {data.get('id')} in folder {parent_folder_id} ({len(content)} bytes)")
        return data

    async def create_permission(self, file_id: str, permission: Dict[str, Any]) -> Dict[str, Any]:
        """Grant a permission, e.g. {"type": "anyone", "role": "reader"}"""
        response = await self._request(
            "POST",
            f"{self.FILES_URL}/{file_id}/permissions",
            params={"supportsAllDrives": "true"},
            json=permission,
        )
        data = self._json(response)
        logger.info(f"[Drive] Granted {permission.get('role')} to {permission.get('type')} on {file_id}")
        return data

    async def delete_file(self, file_id: str) -> None:
        """Delete a file; raises DriveFileNotFoundError if it is already gone"""
        await self._request(
            "DELETE",
            f"{self.FILES_URL}/{file_id}",
            params={"supportsAllDrives": "true"},
        )
        logger.info(f"[Drive] Deleted file {file_id}")
