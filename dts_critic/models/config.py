import os

from pydantic import BaseModel, Field

from dts_critic.models.diagnostic import ErrorKind

REAL_EXPORT_DEFAULT_PACKAGES: dict[str, bool] = {
    "ember-feature-flags": True,
    "material-ui-datatables": True,
}
# Any package whose name contains one of these is covered as well.
REAL_EXPORT_DEFAULT_NAME_PARTS: tuple[str, ...] = ("react-native",)
EXISTING_SQUATTERS: dict[str, bool] = {
    "atom": True,
    "ember__string": True,
    "fancybox": True,
    "jsqrcode": True,
    "node": True,
    "geojson": True,
    "titanium": True,
}
DEFAULT_EXPORT_MARKERS: tuple[str, ...] = (
    "default",
    "__esModule",
    "react-side-effect",
    "@flow",
)
SOURCE_UNAVAILABLE_SENTINELS: tuple[str, ...] = (
    "524: A timeout occurred",
    "500 Server Error",
    "Cannot find package",
    "Rate exceeded",
)


class CriticConfig(BaseModel):
    registry_url: str = os.getenv("DTS_CRITIC_REGISTRY_URL", "https://registry.npmjs.org")
    unpkg_url: str = os.getenv("DTS_CRITIC_UNPKG_URL", "https://unpkg.com")
    node_executable: str = os.getenv("DTS_CRITIC_NODE", "node")
    timeout_seconds: float = float(os.getenv("DTS_CRITIC_TIMEOUT", "30"))

    enabled_errors: dict[ErrorKind, bool] = Field(default_factory=dict)
    # Packages whose real default export is invisible to introspection.
    real_export_default_packages: dict[str, bool] = Field(
        default_factory=lambda: dict(REAL_EXPORT_DEFAULT_PACKAGES)
    )
    real_export_default_name_parts: tuple[str, ...] = REAL_EXPORT_DEFAULT_NAME_PARTS
    existing_squatters: dict[str, bool] = Field(
        default_factory=lambda: dict(EXISTING_SQUATTERS)
    )
    default_export_markers: tuple[str, ...] = DEFAULT_EXPORT_MARKERS
    source_unavailable_sentinels: tuple[str, ...] = SOURCE_UNAVAILABLE_SENTINELS

    def is_enabled(self, kind: ErrorKind) -> bool:
        return self.enabled_errors.get(kind, True)

    def is_real_export_default(self, name: str) -> bool:
        if self.real_export_default_packages.get(name, False):
            return True
        return any(part in name for part in self.real_export_default_name_parts)

    def is_existing_squatter(self, name: str) -> bool:
        return self.existing_squatters.get(name, False)
