from pathlib import Path

import httpx
import pytest

from dts_critic.clients.node_inspector import IModuleInspector, NodeModuleInspector
from dts_critic.models.base import SourcePosition
from dts_critic.models.runtime_module import RuntimeModule

PACKAGES: dict[str, dict[str, object]] = {
    "typescript": {
        "name": "typescript",
        "versions": {"3.7.5": {}, "3.8.3": {}, "4.0.2": {}},
        "dist-tags": {"latest": "4.0.2", "next": "4.1.0-dev"},
        "homepage": "https://www.typescriptlang.org/",
    },
    "tslib": {
        "name": "tslib",
        "versions": {"1.10.0": {}, "2.0.1": {}},
        "dist-tags": {"latest": "2.0.1"},
    },
    "left-pad": {
        "name": "left-pad",
        "versions": {"1.2.0": {}, "1.3.0": {}},
        "dist-tags": {"latest": "1.3.0"},
    },
    "react-native-thing": {
        "name": "react-native-thing",
        "versions": {"1.2.0": {}},
        "dist-tags": {"latest": "1.2.0"},
    },
    "atom": {
        "name": "atom",
        "versions": {"1.0.0": {}},
        "dist-tags": {"latest": "1.0.0"},
    },
}

SOURCES: dict[str, str] = {
    "/left-pad@1.2": "module.exports = leftPad;\nfunction leftPad(str, len, ch) {}\n",
    "/react-native-thing@1.2": "module.exports = {};\n",
}

requires_node = pytest.mark.skipif(
    not NodeModuleInspector().is_available(), reason="Node.js is not installed"
)


class FakeInspector(IModuleInspector):
    """Returns a prepared record instead of running Node.js."""

    module: RuntimeModule
    inspected: list[Path] = []

    def inspect(self, path: Path) -> RuntimeModule:
        self.inspected.append(path)
        return self.module


def registry_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "unpkg.test":
        source = SOURCES.get(request.url.path)
        if source is None:
            return httpx.Response(404, text="Cannot find package")
        return httpx.Response(200, text=source)

    package = PACKAGES.get(request.url.path.lstrip("/"))
    if package is None:
        return httpx.Response(404, json={"error": "Not found"})
    return httpx.Response(200, json=package)


def span_of_snippet(text: str, snippet: str, occurrence: int = 0) -> SourcePosition:
    """Byte span of the ``occurrence``-th appearance of ``snippet`` in ``text``."""
    index = -1
    for _ in range(occurrence + 1):
        index = text.index(snippet, index + 1)
    start = len(text[:index].encode("utf-8"))
    return SourcePosition(start=start, length=len(snippet.encode("utf-8")))
