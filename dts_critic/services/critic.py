import logging
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from dts_critic.clients.node_inspector import IModuleInspector, NodeModuleInspector
from dts_critic.clients.npm_registry import NpmRegistryClient
from dts_critic.exceptions import CannotEvaluateError, NameMismatchError
from dts_critic.models.config import CriticConfig
from dts_critic.models.diagnostic import CheckMode, Diagnostic
from dts_critic.models.npm import NpmInfo
from dts_critic.models.report import CriticReport
from dts_critic.models.runtime_module import RuntimeModule
from dts_critic.services.comparator import ShapeComparator
from dts_critic.services.header_parser import parse_header
from dts_critic.services.names import dt_to_npm_name, find_dts_name, find_source_name
from dts_critic.services.registry import RegistryCheckService
from dts_critic.services.shape.actual import ActualShapeExtractor
from dts_critic.services.shape.declared import DeclaredShapeExtractor

logger = logging.getLogger(__name__)


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise CannotEvaluateError(f"Could not read {what} {path}", details={"error": str(e)}) from e


class DtsCritic(BaseModel):
    """Check declaration files against the JavaScript modules they describe.

    Attributes:
        config: Endpoints, allow-lists and enabled diagnostic kinds.
        inspector: Loads JavaScript modules; Node.js by default.
        registry_client: npm registry client; created on demand when not given.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: CriticConfig = Field(default_factory=CriticConfig)
    inspector: IModuleInspector | None = None
    registry_client: NpmRegistryClient | None = None
    __inspector: IModuleInspector = PrivateAttr()

    def model_post_init(self, context: Any) -> None:
        self.__inspector = self.inspector or NodeModuleInspector(config=self.config)
        return super().model_post_init(context)

    def check_declaration(
        self,
        name: str,
        declaration: str | None,
        module: RuntimeModule,
        source_text: str | None = None,
        mode: CheckMode = CheckMode.LOCAL,
    ) -> list[Diagnostic]:
        """Compare a declaration with a loaded module.

        Args:
            name: Package name, used in messages.
            declaration: Text of the ``.d.ts`` file.
            module: Introspection record of the loaded module.
            source_text: JavaScript source text, None when unavailable.
            mode: npm mode applies the download sentinels.

        Returns:
            Enabled diagnostics in check order.

        Raises:
            CannotEvaluateError: If the declaration text is missing.
        """
        if declaration is None:
            raise CannotEvaluateError(f"No declaration text for '{name}'")

        declared = DeclaredShapeExtractor(name=name, source=declaration).extract()
        actual = ActualShapeExtractor(
            name=name, module=module, source_text=source_text, mode=mode, config=self.config
        ).extract()
        diagnostics = ShapeComparator(config=self.config).compare(name, declared, actual, mode)
        return [diagnostic for diagnostic in diagnostics if self.config.is_enabled(diagnostic.kind)]

    def check_source(
        self,
        name: str,
        dts_path: Path,
        source_path: Path,
        mode: CheckMode = CheckMode.LOCAL,
    ) -> list[Diagnostic]:
        declaration = _read_text(dts_path, "declaration")
        module = self.__inspector.inspect(source_path)

        source_text: str | None = None
        if module.filename is not None:
            try:
                source_text = module.filename.read_text(encoding="utf-8")
            except OSError:
                logger.warning("Could not read source text of %s", module.filename)
        return self.check_declaration(name, declaration, module, source_text, mode)

    def get_npm_info(self, name: str) -> NpmInfo:
        client, owned = self.__registry_client()
        try:
            return RegistryCheckService(client=client, config=self.config).get_npm_info(name)
        finally:
            if owned:
                client.close()

    def critique(self, dts_path: str | Path, source_path: str | Path | None = None) -> CriticReport:
        """Run every check that applies to a declaration file.

        With a source path, the source is loaded locally and the names must agree.
        Without one, the declaration is checked against npm: registry diagnostics
        are returned first, and if there are none the published source for the
        header's version is downloaded and compared.

        Raises:
            NameMismatchError: The declaration and source names differ.
            CannotEvaluateError: A required input could not be read or loaded.
            RegistryError: The registry could not be queried.
        """
        dts_path = Path(dts_path)
        declaration = _read_text(dts_path, "declaration")
        header = parse_header(declaration)
        name = find_dts_name(dts_path)

        if source_path is not None:
            source_path = Path(source_path)
            source_name = find_source_name(source_path)
            if source_name != name:
                raise NameMismatchError(name, source_name)
            diagnostics = self.check_source(name, dts_path, source_path)
            return CriticReport(
                name=name,
                declaration_path=dts_path,
                source_path=source_path,
                mode=CheckMode.LOCAL,
                diagnostics=diagnostics,
            )

        report = CriticReport(name=name, declaration_path=dts_path, mode=CheckMode.NPM)
        client, owned = self.__registry_client()
        try:
            _, registry_diagnostics = RegistryCheckService(client=client, config=self.config).check(
                name, header
            )
            report.diagnostics = [d for d in registry_diagnostics if self.config.is_enabled(d.kind)]
            if registry_diagnostics:
                return report
            if header is None or header.non_npm:
                logger.info("Skipping source comparison for %s: no npm version to check", name)
                return report

            source_text = client.download_source(dt_to_npm_name(name), header.version)
        finally:
            if owned:
                client.close()

        if source_text is None:
            raise CannotEvaluateError(
                f"Could not download the source of {dt_to_npm_name(name)}@{header.version}",
                details={"name": name, "version": header.version},
            )

        with tempfile.TemporaryDirectory(prefix="dts-critic-") as tmp:
            source_file = Path(tmp) / "index.js"
            source_file.write_text(source_text, encoding="utf-8")
            module = self.__inspector.inspect(source_file)
            report.diagnostics = self.check_declaration(
                name, declaration, module, source_text, CheckMode.NPM
            )
        return report

    def __registry_client(self) -> tuple[NpmRegistryClient, bool]:
        if self.registry_client is not None:
            return self.registry_client, False
        return NpmRegistryClient(self.config), True


def check_declaration(
    name: str,
    declaration: str | None,
    module: RuntimeModule,
    source_text: str | None = None,
    mode: CheckMode = CheckMode.LOCAL,
    config: CriticConfig | None = None,
) -> list[Diagnostic]:
    critic = DtsCritic(config=config or CriticConfig())
    return critic.check_declaration(name, declaration, module, source_text, mode)


def check_source(
    name: str,
    dts_path: str | Path,
    source_path: str | Path,
    config: CriticConfig | None = None,
) -> list[Diagnostic]:
    critic = DtsCritic(config=config or CriticConfig())
    return critic.check_source(name, Path(dts_path), Path(source_path))


def dts_critic(
    dts_path: str | Path,
    source_path: str | Path | None = None,
    config: CriticConfig | None = None,
) -> list[Diagnostic]:
    return DtsCritic(config=config or CriticConfig()).critique(dts_path, source_path).diagnostics


def get_npm_info(name: str, config: CriticConfig | None = None) -> NpmInfo:
    return DtsCritic(config=config or CriticConfig()).get_npm_info(name)
