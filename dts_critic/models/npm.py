from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, Field


class NpmInfo(BaseModel):
    """What the npm registry knows about a package."""

    is_npm: bool
    versions: list[str] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    homepage: str | None = None

    def major_minor_versions(self) -> list[str]:
        """Published versions reduced to ``major.minor``, in registry order.

        Versions that do not parse are skipped.
        """

        result: list[str] = []
        for raw in self.versions:
            try:
                version = Version(raw)
            except InvalidVersion:
                continue
            major_minor = f"{version.major}.{version.minor}"
            if major_minor not in result:
                result.append(major_minor)
        return result

    @property
    def latest(self) -> str | None:
        return self.tags.get("latest")
