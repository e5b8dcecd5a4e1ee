"""
HTTP client for the public inquiry endpoints of the CRM backend.
"""
import asyncio
from typing import Any, Dict, Mapping, Optional

import aiohttp

from partner_bot.config import settings
from partner_bot.wizard.errors import ApiError
from partner_bot.wizard.fields import FileRef
from partner_bot.logger import get_logger

logger = get_logger(__name__)

SEND_OTP_PATH = "/inquiry/send-otp"
VERIFY_OTP_PATH = "/inquiry/verify-otp"
UPLOAD_DOCUMENTS_PATH = "/inquiry/upload-agent-documents"
PARTNER_APPLICATION_PATH = "/inquiry/partner-application"
SETTINGS_PATH = "/settings"


class InquiryApiClient:
    """
    Thin async wrapper around the backend REST contract.

    Every method returns the decoded JSON body on success. A transport error,
    a non-2xx status and a `{"success": false}` body all raise ApiError with
    the backend's message when it sent one.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.API_TIMEOUT_SECONDS)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "InquiryApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    # --- Endpoints ---

    async def send_otp(self, email: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            SEND_OTP_PATH,
            "Failed to send OTP. Please try again.",
            json={"email": email},
        )

    async def verify_otp(self, email: str, otp: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            VERIFY_OTP_PATH,
            "Invalid OTP. Please try again.",
            json={"email": email, "otp": otp},
        )

    async def upload_agent_documents(
        self,
        first_name: str,
        last_name: str,
        temp_agent_id: str,
        files: Mapping[str, FileRef],
    ) -> Dict[str, str]:
        """Upload staged files in one multipart batch. Returns slot -> stored path."""
        form = aiohttp.FormData()
        form.add_field("firstName", first_name or "")
        form.add_field("lastName", last_name or "")
        form.add_field("tempAgentId", temp_agent_id)
        for slot_name, file_ref in files.items():
            form.add_field(
                slot_name,
                file_ref.content,
                filename=file_ref.name,
                content_type=file_ref.media_type,
            )

        body = await self._request(
            "POST",
            UPLOAD_DOCUMENTS_PATH,
            "Failed to upload documents. Please try again.",
            data=form,
        )
        data = body.get("data") or {}
        paths = data.get("documentPaths") or body.get("documentPaths") or {}
        return dict(paths)

    async def submit_partner_application(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "POST",
            PARTNER_APPLICATION_PATH,
            "Failed to submit application.",
            json=dict(payload),
        )

    async def get_settings(self) -> Dict[str, Any]:
        return await self._request(
            "GET",
            SETTINGS_PATH,
            "Failed to fetch settings",
        )

    # --- Internals ---

    async def _request(
        self,
        method: str,
        path: str,
        default_message: str,
        **kwargs,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        session = self._get_session()

        try:
            async with session.request(method, url, **kwargs) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Backend unreachable", method=method, path=path, error=str(e))
            raise ApiError(default_message) from e

        if not isinstance(body, dict):
            body = {}

        if status >= 400 or not body.get("success"):
            message = body.get("message") or default_message
            logger.warning(
                "Backend rejected request",
                method=method,
                path=path,
                status=status,
                message=message,
            )
            raise ApiError(message, status=status)

        logger.debug("Backend request succeeded", method=method, path=path, status=status)
        return body
