import logging

from pydantic import BaseModel, Field

from dts_critic.models.config import CriticConfig
from dts_critic.models.diagnostic import CheckMode
from dts_critic.models.runtime_module import RuntimeModule
from dts_critic.models.shape import ActualShape, DefaultExportEvidence
from dts_critic.services.shape.consts import INTEROP_KEYS, REEXPORT_RELAY_PATTERN

logger = logging.getLogger(__name__)


class ActualShapeExtractor(BaseModel):
    """Derive the actual shape of a module from its runtime introspection record.

    Attributes:
        name: Module name used in messages.
        module: Record produced by loading the module in Node.js.
        source_text: Raw JavaScript source, or None when it could not be obtained.
        mode: Whether npm registry semantics apply.
        config: Marker and sentinel lists.
    """

    name: str
    module: RuntimeModule
    source_text: str | None = None
    mode: CheckMode = CheckMode.LOCAL
    config: CriticConfig = Field(default_factory=CriticConfig)

    def extract(self) -> ActualShape:
        module = self.module
        properties = tuple(key for key in module.own_keys if key not in INTEROP_KEYS)
        shape = ActualShape(
            name=self.name,
            properties=properties,
            is_callable=module.is_callable,
            is_constructible=module.is_constructible,
            uses_module_exports_assignment=module.replaced_exports
            and (module.is_callable or not module.is_plain_object),
            default_export_evidence=self.__default_export_evidence(),
        )
        logger.debug(
            "Actual shape of %s: %d properties, callable=%s, constructible=%s, default=%s",
            self.name,
            len(shape.properties),
            shape.is_callable,
            shape.is_constructible,
            shape.default_export_evidence,
        )
        return shape

    def __default_export_evidence(self) -> DefaultExportEvidence:
        if self.module.has_default_key or self.module.es_module_flag:
            return DefaultExportEvidence.PRESENT
        if self.source_text is None:
            return DefaultExportEvidence.UNAVAILABLE

        text = self.source_text
        if self.mode == CheckMode.NPM:
            for sentinel in self.config.source_unavailable_sentinels:
                if sentinel in text:
                    logger.info("Source of %s looks like a failed download (%r)", self.name, sentinel)
                    return DefaultExportEvidence.UNAVAILABLE

        if any(marker in text for marker in self.config.default_export_markers):
            return DefaultExportEvidence.PRESENT
        if REEXPORT_RELAY_PATTERN.search(text) is not None:
            return DefaultExportEvidence.PRESENT
        return DefaultExportEvidence.ABSENT


def extract_actual_shape(
    name: str,
    module: RuntimeModule,
    source_text: str | None = None,
    mode: CheckMode = CheckMode.LOCAL,
    config: CriticConfig | None = None,
) -> ActualShape:
    return ActualShapeExtractor(
        name=name,
        module=module,
        source_text=source_text,
        mode=mode,
        config=config or CriticConfig(),
    ).extract()
