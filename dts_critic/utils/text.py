from dts_critic.models.base import SourcePosition


def line_and_column(text: str, position: SourcePosition) -> tuple[int, int]:
    """1-based line and column of a byte offset into the UTF-8 encoding of ``text``.

    Columns count characters, not bytes.
    """
    prefix = text.encode("utf-8")[: position.start].decode("utf-8", errors="ignore")
    line = prefix.count("\n") + 1
    column = len(prefix) - (prefix.rfind("\n") + 1) + 1
    return line, column
