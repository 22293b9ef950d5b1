"""Attachment storage: hosted object storage, or a local folder in development."""
from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path

import requests
from flask import url_for

from rental.errors import StorageError
from rental.integrations.http import ApiClient

_stamp_lock = threading.Lock()
_last_stamp = 0


def _unique_millis() -> int:
    """Millisecond timestamp, strictly increasing within the process."""
    global _last_stamp
    with _stamp_lock:
        stamp = max(int(time.time() * 1000), _last_stamp + 1)
        _last_stamp = stamp
        return stamp


def attachment_path(quote_id: str, kind: str, filename: str) -> str:
    """``{quote_id}/{kind}_{timestamp}.{ext}``; a new path on every call."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"{quote_id}/{kind}_{_unique_millis()}.{ext}"


class HostedStorage:
    """Object storage bucket behind the hosted store's REST API."""

    def __init__(self, base_url: str, api_key: str, bucket: str, timeout: int = 10) -> None:
        self.bucket = bucket
        self.client = ApiClient(
            base_url,
            api_key=api_key,
            timeout=timeout,
            headers={"apikey": api_key},
        )

    def public_url(self, path: str) -> str:
        return self.client.url(f"/storage/v1/object/public/{self.bucket}/{path}")

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        headers = {"Content-Type": content_type or "application/octet-stream"}
        try:
            self.client.post(
                f"/storage/v1/object/{self.bucket}/{path}", data=data, headers=headers
            )
        except requests.RequestException as e:
            raise StorageError(f"Upload of {path} failed: {e}") from e
        logging.info("uploaded %s (%s bytes) to bucket %s", path, len(data), self.bucket)
        return self.public_url(path)


class LocalStorage:
    """Writes attachments under a directory served by the quotes blueprint."""

    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        target = self.root / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Could not store {path}: {e}") from e
        return url_for("quotes.attachment_file", path=path, _external=True)


def get_storage(app):
    cfg = app.config
    if cfg.get("SUPABASE_URL"):
        return HostedStorage(
            cfg["SUPABASE_URL"],
            cfg.get("SUPABASE_KEY", ""),
            cfg.get("ATTACHMENTS_BUCKET", "quote_attachments"),
            timeout=cfg.get("HTTP_TIMEOUT", 10),
        )
    return LocalStorage(os.path.join(app.instance_path, "attachments"))
