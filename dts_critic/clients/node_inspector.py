import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Final

from pydantic import BaseModel, Field, ValidationError

from dts_critic.exceptions import CannotEvaluateError
from dts_critic.models.config import CriticConfig
from dts_critic.models.runtime_module import RuntimeModule

logger = logging.getLogger(__name__)

REPORT_MARKER: Final[str] = "__DTS_CRITIC__"

# Loads argv[1] into a fresh Module so the initial exports object can be compared
# with the final one, then prints a single marker-prefixed JSON line.
INSPECT_SCRIPT: Final[str] = """
const Module = require("module");
const path = require("path");
const target = require.resolve(path.resolve(process.argv[1]));
const mod = new Module(target, null);
mod.filename = target;
mod.paths = Module._nodeModulePaths(path.dirname(target));
const initial = mod.exports;
mod.load(target);
const value = mod.exports;
const isObject = value !== null && (typeof value === "object" || typeof value === "function");
let constructible = false;
if (typeof value === "function") {
    try {
        Reflect.construct(String, [], value);
        constructible = true;
    } catch (e) {}
}
const proto = isObject ? Object.getPrototypeOf(value) : undefined;
const report = {
    filename: target,
    type_of: value === null ? "null" : typeof value,
    own_keys: isObject ? Object.keys(value) : [],
    is_callable: typeof value === "function",
    is_constructible: constructible,
    is_plain_object: typeof value === "object" && value !== null
        && (proto === Object.prototype || proto === null),
    replaced_exports: value !== initial,
    es_module_flag: isObject && value.__esModule === true,
    has_default_key: isObject && Object.prototype.hasOwnProperty.call(value, "default"),
};
process.stdout.write("__DTS_CRITIC__" + JSON.stringify(report) + "\\n", () => process.exit(0));
"""


class IModuleInspector(ABC, BaseModel):
    @abstractmethod
    def inspect(self, path: Path) -> RuntimeModule:
        pass


class NodeModuleInspector(IModuleInspector):
    """Load a JavaScript module in a Node.js child process and describe its exports."""

    config: CriticConfig = Field(default_factory=CriticConfig)

    def is_available(self) -> bool:
        return shutil.which(self.config.node_executable) is not None

    def inspect(self, path: Path) -> RuntimeModule:
        """Evaluate the module at ``path`` and report its ``module.exports``.

        Args:
            path: A JavaScript file, or a package directory Node.js can resolve.

        Returns:
            The introspection record of the loaded module.

        Raises:
            CannotEvaluateError: Node.js is missing, the module failed to load,
                or no report came back in time.
        """
        if not self.is_available():
            raise CannotEvaluateError(
                "Node.js is required to load the JavaScript module",
                details={"node": self.config.node_executable},
            )

        command = [self.config.node_executable, "-e", INSPECT_SCRIPT, str(path)]
        logger.debug("Inspecting %s with %s", path, self.config.node_executable)
        try:
            completed = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise CannotEvaluateError(
                f"Loading {path} timed out after {self.config.timeout_seconds} seconds",
                details={"path": str(path)},
            ) from e

        if completed.returncode != 0:
            raise CannotEvaluateError(
                f"Could not load JavaScript module {path}",
                details={"path": str(path), "stderr": completed.stderr.strip()},
            )

        for line in completed.stdout.splitlines():
            if not line.startswith(REPORT_MARKER):
                continue
            try:
                return RuntimeModule.model_validate_json(line[len(REPORT_MARKER) :])
            except ValidationError as e:
                raise CannotEvaluateError(
                    f"Malformed introspection report for {path}",
                    details={"path": str(path), "errors": str(e)},
                ) from e

        raise CannotEvaluateError(
            f"Node.js produced no introspection report for {path}",
            details={"path": str(path), "stdout": completed.stdout.strip()},
        )
