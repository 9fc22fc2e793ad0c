from tree_sitter import Node as TSNode

from dts_critic.models.base import SourcePosition


def node_text(node: TSNode) -> str:
    return (node.text or b"").decode("utf-8")


def has_token(node: TSNode, token: str) -> bool:
    """Whether ``node`` has an anonymous child for the keyword or punctuation ``token``."""

    return any(not child.is_named and child.type == token for child in node.children)


def first_named_child_of_type(node: TSNode, *types: str) -> TSNode | None:
    for child in node.named_children:
        if child.type in types:
            return child
    return None


def span_of(node: TSNode) -> SourcePosition:
    return SourcePosition(start=node.start_byte, length=node.end_byte - node.start_byte)


def unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'`":
        return raw[1:-1]
    return raw
