"""Blob store adapter for the Supabase Storage REST API."""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, quote, urlsplit

import httpx

from app.logging.logger import Log
from app.storage.base import BaseStorageGateway
from app.storage.exceptions import ObjectDownloadError, StorageError
from app.storage.models import UploadHandle


class SupabaseStorageGateway(BaseStorageGateway):
    """Signs, downloads and removes objects in one Supabase Storage bucket."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: int = 30,
        upload_url_ttl_seconds: int = 300,
        download_url_ttl_seconds: int = 3600,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = base_url.rstrip("/")
        self._api_url = f"{self._url}/storage/v1"
        self._bucket = bucket
        self._upload_ttl = upload_url_ttl_seconds
        self._download_ttl = download_url_ttl_seconds
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }

    def issue_upload_handle(self, path: str) -> UploadHandle:
        url = f"{self._api_url}/object/upload/sign/{self._bucket}/{quote(path)}"
        try:
            response = self._client.post(
                url,
                headers={**self._headers, "x-upsert": "false"},
                json={"expiresIn": self._upload_ttl},
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to sign upload URL: {exc}") from exc

        if response.status_code != 200:
            Log.error(
                f"Storage refused upload signing for {path}: "
                f"{response.status_code} {response.text}"
            )
            raise StorageError(f"Failed to sign upload URL: HTTP {response.status_code}")

        signed_path = response.json().get("url")
        if not signed_path:
            raise StorageError("Storage response did not contain an upload url")

        token = parse_qs(urlsplit(signed_path).query).get("token", [""])[0]
        if not token:
            raise StorageError("Storage upload url did not carry a token")

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self._upload_ttl)
        return UploadHandle(
            upload_url=self._absolute(signed_path),
            token=token,
            path=path,
            expires_at=expires_at,
        )

    def download(self, path: str) -> bytes:
        signed_url = self._sign_download(path)
        try:
            response = self._client.get(signed_url)
        except httpx.HTTPError as exc:
            raise ObjectDownloadError(f"Failed to download file: {exc}") from exc

        if not response.is_success:
            raise ObjectDownloadError(
                f"Failed to download file: HTTP {response.status_code} {response.reason_phrase}"
            )
        return response.content

    def delete(self, path: str) -> bool:
        try:
            response = self._client.request(
                "DELETE",
                f"{self._api_url}/object/{self._bucket}",
                headers=self._headers,
                json={"prefixes": [path]},
            )
        except httpx.HTTPError as exc:
            Log.warning(f"Storage delete of {path} failed: {exc}")
            return False

        if not response.is_success:
            Log.warning(
                f"Storage delete of {path} failed: {response.status_code} {response.text}"
            )
            return False
        return True

    def _sign_download(self, path: str) -> str:
        url = f"{self._api_url}/object/sign/{self._bucket}/{quote(path)}"
        try:
            response = self._client.post(
                url,
                headers=self._headers,
                json={"expiresIn": self._download_ttl},
            )
        except httpx.HTTPError as exc:
            raise ObjectDownloadError(f"Failed to generate signed URL: {exc}") from exc

        if response.status_code != 200:
            raise ObjectDownloadError(
                f"Failed to generate signed URL: HTTP {response.status_code}"
            )
        signed_path = response.json().get("signedURL")
        if not signed_path:
            raise ObjectDownloadError("Storage response did not contain signedURL")
        return self._absolute(signed_path)

    def _absolute(self, signed_path: str) -> str:
        # Storage returns paths relative to /storage/v1; older servers include the prefix.
        if signed_path.startswith("http://") or signed_path.startswith("https://"):
            return signed_path
        if signed_path.startswith("/storage/v1"):
            return f"{self._url}{signed_path}"
        return f"{self._api_url}{signed_path}"
