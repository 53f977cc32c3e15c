import httpx

from app.logging.logger import Log


class DispatcherTrigger:
    """Fire-and-forget wake-up call to the dispatcher endpoint.

    Purely a latency hint: the periodic poll picks the job up regardless,
    so every failure here is logged and dropped.
    """

    def __init__(
        self,
        url: str,
        secret: str,
        timeout_seconds: float = 2,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._secret = secret
        self._client = client or httpx.Client(timeout=timeout_seconds)

    @property
    def enabled(self) -> bool:
        return bool(self._url)

    def notify(self) -> bool:
        if not self.enabled:
            Log.debug("Dispatcher trigger URL not configured, relying on poll")
            return False

        headers = {"Authorization": f"Bearer {self._secret}"} if self._secret else {}
        try:
            response = self._client.post(self._url, headers=headers)
        except httpx.HTTPError as exc:
            Log.warning(f"Dispatcher wake-up failed: {exc}")
            return False

        if response.is_error:
            Log.warning(f"Dispatcher wake-up returned HTTP {response.status_code}")
            return False
        return True
