from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class RuntimeValueType(StrEnum):
    """Result of ``typeof`` on the export value (``null`` kept apart from objects)."""

    OBJECT = "object"
    FUNCTION = "function"
    NULL = "null"
    UNDEFINED = "undefined"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SYMBOL = "symbol"
    BIGINT = "bigint"


class RuntimeModule(BaseModel):
    """Introspection record of a loaded JavaScript module.

    Attributes:
        filename: File Node.js resolved and evaluated, when known.
        type_of: Runtime type of ``module.exports``.
        own_keys: Own enumerable string keys, in insertion order.
        is_callable: Whether the export value can be called.
        is_constructible: Whether the export value can be used with ``new``.
        is_plain_object: Whether the export value is an object literal.
        replaced_exports: Whether the module replaced its initial ``exports`` object.
        es_module_flag: Whether the export value carries ``__esModule === true``.
        has_default_key: Whether the export value has an own ``default`` key.
    """

    model_config = ConfigDict(frozen=True)

    filename: Path | None = None
    type_of: RuntimeValueType = RuntimeValueType.OBJECT
    own_keys: tuple[str, ...] = Field(default=())
    is_callable: bool = False
    is_constructible: bool = False
    is_plain_object: bool = True
    replaced_exports: bool = False
    es_module_flag: bool = False
    has_default_key: bool = False
