import logging
import random
import time
from typing import Any, Dict, Optional

import requests

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


class ApiClient:
    """JSON-over-HTTP client with retry and exponential backoff.

    Network errors, 429 and 5xx responses to idempotent requests are retried
    ``max_tries`` times.  POSTs are sent exactly once.  Anything else is returned
    (or raised by ``raise_for_status``) immediately.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: int = 10,
        max_tries: int = 3,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_tries = max_tries
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})
        if headers:
            self.session.headers.update(headers)

    def url(self, path: str) -> str:
        if not path:
            return self.base_url
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self.url(path)
        max_tries = self.max_tries if method.upper() in IDEMPOTENT_METHODS else 0
        tries = 0
        while True:
            try:
                r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.RequestException as e:  # network issue
                tries += 1
                if tries > max_tries:
                    raise
                delay = min(2 ** tries, 30) + random.random()
                logging.warning("%s %s failed (%s); retrying in %.1fs", method, url, e, delay)
                time.sleep(delay)
                continue
            if r.status_code == 429 or r.status_code >= 500:
                tries += 1
                if tries > max_tries:
                    r.raise_for_status()
                delay = min(2 ** tries, 30) + random.random()
                logging.warning("%s %s -> %s; retrying in %.1fs", method, url, r.status_code, delay)
                time.sleep(delay)
                continue
            r.raise_for_status()
            return r

    def post(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", path, **kwargs)
