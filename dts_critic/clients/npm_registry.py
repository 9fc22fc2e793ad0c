"""
npm registry and unpkg HTTP client.

Registry metadata:
    GET {registry_url}/{name}

    {
        "name": "left-pad",
        "versions": {"1.0.0": {...}, "1.3.0": {...}},
        "dist-tags": {"latest": "1.3.0"},
        "homepage": "https://github.com/stevemao/left-pad"
    }

    Unknown packages answer 404 or {"error": "Not found"}.

Module source:
    GET {unpkg_url}/{name}@{version}  (redirects to the package's main file)
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from dts_critic.exceptions import RegistryError
from dts_critic.models.config import CriticConfig

logger = logging.getLogger(__name__)


class NpmRegistryClient:
    """Synchronous client for the npm registry and the unpkg CDN.

    Attributes:
        cfg: Endpoint URLs and timeout.
    """

    def __init__(self, cfg: CriticConfig | None = None, client: httpx.Client | None = None) -> None:
        self.cfg: CriticConfig = cfg or CriticConfig()
        self.client: httpx.Client = client or httpx.Client(timeout=self.cfg.timeout_seconds)

    def get_package(self, npm_name: str) -> dict[str, Any] | None:
        """Fetch registry metadata for a package.

        Args:
            npm_name: npm package name, scoped names included.

        Returns:
            The registry document, or None when the package does not exist.

        Raises:
            RegistryError: The request failed or the registry answered unexpectedly.
        """
        url = f"{self.cfg.registry_url.rstrip('/')}/{quote(npm_name, safe='@')}"
        try:
            response = self.client.get(url)
        except httpx.HTTPError as e:
            logger.error("Registry request for %s failed: %s", npm_name, e)
            raise RegistryError(npm_name, str(e)) from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise RegistryError(npm_name, f"unexpected status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise RegistryError(npm_name, "response is not JSON") from e
        if not isinstance(payload, dict):
            raise RegistryError(npm_name, "response is not a JSON object")
        if "error" in payload:
            logger.debug("Registry has no package %s: %s", npm_name, payload["error"])
            return None
        return payload

    def download_source(self, npm_name: str, version: str) -> str | None:
        """Download the main file of ``npm_name@version`` from unpkg.

        Returns:
            The file text, or None when it could not be downloaded.
        """
        url = f"{self.cfg.unpkg_url.rstrip('/')}/{npm_name}@{version}"
        try:
            response = self.client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning("Could not download %s: %s", url, e)
            return None
        if not response.is_success:
            logger.warning("Could not download %s: status %d", url, response.status_code)
            return None
        return response.text

    def close(self) -> None:
        """Close HTTP client"""
        self.client.close()
