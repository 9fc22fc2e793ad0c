import re

EXPORT_EQUALS_PATTERN: re.Pattern[str] = re.compile(r"\bexport\s*=(?![=>])")
EXPORT_DEFAULT_PATTERN: re.Pattern[str] = re.compile(r"\bexport\s+default\b")
AMBIENT_MODULE_PATTERN: re.Pattern[str] = re.compile(r"\bdeclare\s+module\s+['\"]")
REEXPORT_RELAY_PATTERN: re.Pattern[str] = re.compile(r"module\.exports\s*=\s*require\s*\(")

# Keys that belong to ES module interop rather than to the exported surface.
INTEROP_KEYS: frozenset[str] = frozenset({"default", "__esModule"})

VARIABLE_DECLARATION_TYPES: set[str] = {
    "lexical_declaration",
    "variable_declaration",
}
FUNCTION_DECLARATION_TYPES: set[str] = {
    "function_signature",
    "function_declaration",
    "generator_function_declaration",
}
CLASS_DECLARATION_TYPES: set[str] = {
    "class_declaration",
    "abstract_class_declaration",
}
NAMESPACE_DECLARATION_TYPES: set[str] = {
    "internal_module",
    "module",
}
CLASS_MEMBER_TYPES: set[str] = {
    "method_signature",
    "method_definition",
    "public_field_definition",
    "abstract_method_signature",
}
OBJECT_MEMBER_TYPES: set[str] = {
    "property_signature",
    "method_signature",
}
PROPERTY_NAME_TYPES: set[str] = {
    "property_identifier",
    "identifier",
    "string",
    "number",
}
TYPE_REFERENCE_TYPES: set[str] = {
    "type_identifier",
    "generic_type",
    "nested_type_identifier",
}
COMBINED_TYPE_TYPES: set[str] = {
    "union_type",
    "intersection_type",
    "parenthesized_type",
}
MAX_TYPE_DEPTH = 8

# Top-level statements that make a declaration file a module rather than a script.
MODULE_STATEMENT_TYPES: set[str] = {"export_statement", "import_statement"}
