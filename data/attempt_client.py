import json
import logging
import threading
from typing import Any, Optional
from urllib import error, request
from urllib.parse import urlparse

from workshop.runtime.models import AttemptRecord

logger = logging.getLogger(__name__)


class AttemptClient:
    """
    Пишет попытки в backend (POST /v1/attempts) в отдельном daemon-потоке.

    Ошибки сети только логируются: без ретраев и без очереди на диске.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        timeout_sec: float = 2.5,
    ) -> None:
        self.api_url = api_url.strip().rstrip("/")
        self.api_key = api_key.strip()
        self.timeout_sec = max(0.5, timeout_sec)
        self.enabled = self.is_valid_endpoint(self.api_url)
        self.last_error: str = ""
        self._threads: list[threading.Thread] = []

    @staticmethod
    def is_valid_endpoint(url: str) -> bool:
        parsed = urlparse((url or "").strip())
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    def submit(self, record: AttemptRecord) -> Optional[threading.Thread]:
        if not self.enabled:
            logger.warning("Attempt not saved: api_url is not configured")
            return None
        body = {"api_key": self.api_key, "attempt": record.to_payload()}
        thread = threading.Thread(target=self._post_attempt, args=(body,), daemon=True)
        self._threads = [t for t in self._threads if t.is_alive()]
        self._threads.append(thread)
        thread.start()
        return thread

    def wait(self, timeout_sec: float = 1.0) -> None:
        for thread in list(self._threads):
            thread.join(timeout=timeout_sec)

    def request_session_id(self) -> Optional[str]:
        if not self.enabled:
            return None
        data = self._post_json(f"{self.api_url}/v1/sessions", {})
        if data is None:
            return None
        user_id = str(data.get("user_id", "")).strip()
        return user_id or None

    def _post_attempt(self, body: dict[str, Any]) -> None:
        data = self._post_json(f"{self.api_url}/v1/attempts", body)
        if data is None:
            logger.error(
                "Attempt write failed (%s) for task_type=%s",
                self.last_error,
                body["attempt"].get("taskType"),
            )
            return
        logger.info("Attempt saved: id=%s", data.get("id"))

    def _post_json(self, url: str, body: dict[str, Any]) -> Optional[dict[str, Any]]:
        payload = json.dumps(body, ensure_ascii=False).encode("utf-8")
        req = request.Request(
            url,
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with request.urlopen(req, timeout=self.timeout_sec) as resp:
                raw = resp.read().decode("utf-8") or "{}"
                data = json.loads(raw)
        except (error.URLError, error.HTTPError, TimeoutError, OSError) as exc:
            self.last_error = "connection_error"
            logger.warning("Request to %s failed: %s", url, exc)
            return None
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.last_error = "invalid_server_response"
            logger.warning("Unreadable response from %s: %s", url, exc)
            return None
        if not isinstance(data, dict) or data.get("ok") is not True:
            self.last_error = "invalid_server_response"
            return None
        self.last_error = ""
        return data
