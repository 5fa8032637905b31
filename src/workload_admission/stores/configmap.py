"""ConfigMapStore — read policy data from a Kubernetes ConfigMap over HTTPS."""

from __future__ import annotations

import os
import ssl
from pathlib import Path

import httpx

from workload_admission.exceptions import StoreLookupError
from workload_admission.stores.base import PolicyStore

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")


class ConfigMapStore(PolicyStore):
    """Looks up ``data`` of the ConfigMap named by the key.

    Every lookup is a single GET against the API server; no retries are
    made here.  Any transport failure, a missing ConfigMap or a non-200
    answer becomes :class:`StoreLookupError` with a message that does not
    echo the raw transport error.

    Parameters:
        api_server: Base URL of the API server, e.g. ``https://10.0.0.1:443``.
        namespace:  Namespace holding the ConfigMaps.
        token:      Bearer token.  Ignored when ``token_path`` is set.
        token_path: File re-read on every lookup (service-account tokens
                    are rotated by the kubelet).
        ca_path:    CA bundle used to verify the API server certificate.
                    ``None`` uses the system trust store.
        timeout:    Default per-lookup timeout in seconds.

    Example:
        >>> store = ConfigMapStore.from_in_cluster()
        >>> namespaces = await store.get("validator-config")
    """

    def __init__(
        self,
        *,
        api_server: str,
        namespace: str = "default",
        token: str = "",
        token_path: str | Path | None = None,
        ca_path: str | Path | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._api_server = api_server.rstrip("/")
        self._namespace = namespace
        self._token = token
        self._token_path = Path(token_path) if token_path else None
        self._verify: ssl.SSLContext | bool = (
            ssl.create_default_context(cafile=str(ca_path)) if ca_path else True
        )
        self._timeout = timeout

    @classmethod
    def from_in_cluster(cls, *, namespace: str = "default", timeout: float = 5.0) -> ConfigMapStore:
        """Build a store from the pod's service-account credentials.

        Raises:
            StoreLookupError: If the process is not running inside a cluster.
        """
        host = os.getenv("KUBERNETES_SERVICE_HOST")
        port = os.getenv("KUBERNETES_SERVICE_PORT", "443")
        if not host:
            raise StoreLookupError("configure", "KUBERNETES_SERVICE_HOST is not set")
        if ":" in host:
            host = f"[{host}]"
        return cls(
            api_server=f"https://{host}:{port}",
            namespace=namespace,
            token_path=SERVICE_ACCOUNT_DIR / "token",
            ca_path=SERVICE_ACCOUNT_DIR / "ca.crt",
            timeout=timeout,
        )

    def _headers(self) -> dict[str, str]:
        token = self._token
        if self._token_path is not None:
            try:
                token = self._token_path.read_text().strip()
            except OSError as exc:
                raise StoreLookupError("get", f"cannot read token: {exc}") from exc
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def get(self, key: str, *, timeout: float | None = None) -> dict[str, str]:
        url = f"{self._api_server}/api/v1/namespaces/{self._namespace}/configmaps/{key}"
        effective_timeout = timeout if timeout is not None else self._timeout

        try:
            async with httpx.AsyncClient(verify=self._verify) as client:
                response = await client.get(
                    url,
                    headers=self._headers(),
                    timeout=effective_timeout,
                )
        except httpx.TimeoutException as exc:
            raise StoreLookupError("get", f"timed out after {effective_timeout} seconds") from exc
        except httpx.ConnectError as exc:
            raise StoreLookupError("get", f"could not connect to {self._api_server}") from exc
        except httpx.HTTPError as exc:
            raise StoreLookupError("get", f"{type(exc).__name__}: {exc}") from exc

        if response.status_code == 404:
            raise StoreLookupError("get", f"configmap {self._namespace}/{key} not found")
        if response.status_code != 200:
            raise StoreLookupError("get", f"HTTP {response.status_code} for {self._namespace}/{key}")

        try:
            body = response.json()
        except ValueError as exc:
            raise StoreLookupError("get", "response body is not JSON") from exc

        data = body.get("data") if isinstance(body, dict) else None
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreLookupError("get", f"configmap {self._namespace}/{key} has malformed data")
        return {str(k): str(v) for k, v in data.items()}
