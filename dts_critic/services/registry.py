import logging
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from dts_critic.clients.npm_registry import NpmRegistryClient
from dts_critic.models.config import CriticConfig
from dts_critic.models.diagnostic import Diagnostic, ErrorKind
from dts_critic.models.header import DefinitelyTypedHeader
from dts_critic.models.npm import NpmInfo
from dts_critic.services.names import dt_to_npm_name

logger = logging.getLogger(__name__)

NO_MATCHING_NPM_PACKAGE_MESSAGE: Final[str] = """Declaration file must have a matching npm package.
To resolve this error, either:
1. Change the name to match an npm package.
2. Add a Definitely Typed header with the first line


// Type definitions for non-npm package {name}-browser

Add -browser to the end of your name to make sure it doesn't conflict with existing npm packages."""

NO_MATCHING_NPM_VERSION_MESSAGE: Final[str] = """The types for '{name}' must match a version that exists on npm.
You should copy the major and minor version from the package on npm.

To resolve this error, change the version in the header, {header},
to match one on npm: {versions}.

For example, if you're trying to match the latest version, use {latest}."""

NON_NPM_HAS_MATCHING_PACKAGE_MESSAGE: Final[str] = """The non-npm package '{name}' conflicts with the existing npm package '{npm_name}'.
Try adding -browser to the end of the name to get

{name}-browser"""


class RegistryCheckService(BaseModel):
    """Check a declaration's name and header version against the npm registry."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    client: NpmRegistryClient
    config: CriticConfig = Field(default_factory=CriticConfig)

    def get_npm_info(self, name: str) -> NpmInfo:
        """Look up a Definitely Typed name on npm.

        Args:
            name: Declaration name, ``scope__pkg`` for scoped packages.

        Returns:
            NpmInfo with ``is_npm`` False when the package does not exist.
        """
        payload = self.client.get_package(dt_to_npm_name(name))
        if payload is None:
            return NpmInfo(is_npm=False)

        homepage = payload.get("homepage")
        return NpmInfo(
            is_npm=True,
            versions=list(payload.get("versions") or {}),
            tags={str(tag): str(version) for tag, version in (payload.get("dist-tags") or {}).items()},
            homepage=homepage if isinstance(homepage, str) else None,
        )

    def check(
        self, name: str, header: DefinitelyTypedHeader | None
    ) -> tuple[NpmInfo, list[Diagnostic]]:
        """Run the registry checks for a declaration without a local source.

        Returns:
            The registry information and the registry diagnostics, at most one.
        """
        info = self.get_npm_info(name)
        non_npm = header is not None and header.non_npm

        if non_npm:
            if info.is_npm and not self.config.is_existing_squatter(name):
                return info, [
                    Diagnostic(
                        kind=ErrorKind.NON_NPM_HAS_MATCHING_PACKAGE,
                        message=NON_NPM_HAS_MATCHING_PACKAGE_MESSAGE.format(
                            name=name, npm_name=dt_to_npm_name(name)
                        ),
                    )
                ]
            return info, []

        if not info.is_npm:
            return info, [
                Diagnostic(
                    kind=ErrorKind.NO_MATCHING_NPM_PACKAGE,
                    message=NO_MATCHING_NPM_PACKAGE_MESSAGE.format(name=name),
                )
            ]

        if header is not None:
            versions = info.major_minor_versions()
            if header.version not in versions:
                logger.info("%s %s is not published on npm", name, header.version)
                return info, [
                    Diagnostic(
                        kind=ErrorKind.NO_MATCHING_NPM_VERSION,
                        message=NO_MATCHING_NPM_VERSION_MESSAGE.format(
                            name=name,
                            header=header.version,
                            versions=", ".join(versions) or "NO VERSIONS FOUND",
                            latest=versions[-1] if versions else "NO LATEST VERSION FOUND",
                        ),
                    )
                ]
        return info, []
