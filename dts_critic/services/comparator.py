import logging
from typing import Final

from pydantic import BaseModel, Field

from dts_critic.exceptions import CannotEvaluateError
from dts_critic.models.config import CriticConfig
from dts_critic.models.diagnostic import CheckMode, Diagnostic, ErrorKind
from dts_critic.models.shape import ActualShape, DeclaredShape, DefaultExportEvidence

logger = logging.getLogger(__name__)

LEARN_MORE: Final[str] = (
    "To learn more about 'export =' syntax, see "
    "https://www.typescriptlang.org/docs/handbook/modules.html#export--and-import--require."
)
EXPORT_EQUALS_GUIDANCE: Final[str] = (
    "\n\nThe most common way to resolve this error is to use 'export =' syntax.\n" + LEARN_MORE
)

DTS_PROPERTY_NOT_IN_JS_REASON: Final[str] = (
    "The declaration module exports a property named '{property}', "
    "which is missing from the JavaScript module."
)
JS_PROPERTY_NOT_IN_DTS_REASON: Final[str] = (
    "The JavaScript module exports a property named '{property}', "
    "which is missing from the declaration module."
)
JS_CALLABLE_REASON: Final[str] = (
    "The JavaScript module can be called or constructed, but the declaration module cannot."
)
DTS_CALLABLE_REASON: Final[str] = (
    "The declaration module can be called or constructed, but the JavaScript module cannot."
)
NEEDS_EXPORT_EQUALS_REASON: Final[str] = (
    "The declaration should use 'export =' syntax because the JavaScript source uses "
    "'module.exports =' syntax and 'module.exports' can be called or constructed.\n\n"
    + LEARN_MORE
)
NO_DEFAULT_EXPORT_REASON: Final[str] = (
    "The declaration specifies 'export default' but the JavaScript source does not "
    "mention 'default' anywhere.\n\n"
    "The most common way to resolve this error is to use 'export =' syntax instead of "
    "'export default'.\n" + LEARN_MORE
)


def mismatch_message(name: str, reason: str) -> str:
    return f"The declaration doesn't match the JavaScript module '{name}'. Reason:\n{reason}"


class ShapeComparator(BaseModel):
    """Compare a declared shape with an actual shape.

    The checks run in a fixed order and are independent of each other, so every
    applicable diagnostic is reported. Kind filtering is left to the caller.
    """

    config: CriticConfig = Field(default_factory=CriticConfig)

    def compare(
        self,
        name: str,
        declared: DeclaredShape,
        actual: ActualShape,
        mode: CheckMode = CheckMode.LOCAL,
    ) -> list[Diagnostic]:
        """Compare both shapes of module ``name``.

        Args:
            name: Module name; both shapes must carry it.
            declared: Shape from the declaration text.
            actual: Shape from the loaded JavaScript module.
            mode: Where the module came from. The structural checks are the same in both modes.

        Returns:
            Diagnostics in check order, empty when the shapes agree.

        Raises:
            CannotEvaluateError: If a shape belongs to a different module.
        """

        if declared.name != name or actual.name != name:
            raise CannotEvaluateError(
                f"Shapes must describe module '{name}'",
                details={"declared": declared.name, "actual": actual.name},
            )

        diagnostics: list[Diagnostic] = []
        diagnostics.extend(self.__missing_from_js(name, declared, actual))
        diagnostics.extend(self.__missing_from_dts(name, declared, actual))

        if actual.is_invocable and not declared.is_invocable:
            reason = JS_CALLABLE_REASON
            if not declared.uses_export_equals:
                reason += EXPORT_EQUALS_GUIDANCE
            diagnostics.append(
                Diagnostic(kind=ErrorKind.JS_CALLABLE, message=mismatch_message(name, reason))
            )

        if declared.is_invocable and not actual.is_invocable:
            diagnostics.append(
                Diagnostic(
                    kind=ErrorKind.DTS_CALLABLE,
                    message=mismatch_message(name, DTS_CALLABLE_REASON),
                )
            )

        if (
            actual.uses_module_exports_assignment
            and actual.is_invocable
            and not declared.uses_export_equals
        ):
            diagnostics.append(
                Diagnostic(
                    kind=ErrorKind.NEEDS_EXPORT_EQUALS,
                    message=mismatch_message(name, NEEDS_EXPORT_EQUALS_REASON),
                )
            )

        if self.__lacks_default_export(name, declared, actual):
            diagnostics.append(
                Diagnostic(
                    kind=ErrorKind.NO_DEFAULT_EXPORT,
                    message=mismatch_message(name, NO_DEFAULT_EXPORT_REASON),
                    position=declared.default_export_position,
                )
            )

        logger.debug(
            "Comparison of %s (%s mode) produced %d diagnostics", name, mode, len(diagnostics)
        )
        return diagnostics

    def __missing_from_js(
        self, name: str, declared: DeclaredShape, actual: ActualShape
    ) -> list[Diagnostic]:
        actual_names = set(actual.properties)
        return [
            Diagnostic(
                kind=ErrorKind.DTS_PROPERTY_NOT_IN_JS,
                message=mismatch_message(
                    name, DTS_PROPERTY_NOT_IN_JS_REASON.format(property=prop.name)
                ),
                position=prop.position,
            )
            for prop in declared.properties
            if prop.name not in actual_names
        ]

    def __missing_from_dts(
        self, name: str, declared: DeclaredShape, actual: ActualShape
    ) -> list[Diagnostic]:
        declared_names = set(declared.property_names)
        return [
            Diagnostic(
                kind=ErrorKind.JS_PROPERTY_NOT_IN_DTS,
                message=mismatch_message(
                    name, JS_PROPERTY_NOT_IN_DTS_REASON.format(property=prop)
                ),
            )
            for prop in actual.properties
            if prop not in declared_names
        ]

    def __lacks_default_export(
        self, name: str, declared: DeclaredShape, actual: ActualShape
    ) -> bool:
        if not declared.has_default_export_marker or declared.uses_export_equals:
            return False
        if actual.default_export_evidence != DefaultExportEvidence.ABSENT:
            return False
        if self.config.is_real_export_default(name):
            logger.debug("%s has a real default export invisible to introspection", name)
            return False
        return True


def compare(
    name: str,
    declared: DeclaredShape,
    actual: ActualShape,
    mode: CheckMode = CheckMode.LOCAL,
    config: CriticConfig | None = None,
) -> list[Diagnostic]:
    return ShapeComparator(config=config or CriticConfig()).compare(name, declared, actual, mode)
