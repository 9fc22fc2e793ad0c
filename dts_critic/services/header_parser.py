import logging
import re
from typing import Final

from dts_critic.exceptions import HeaderParseError
from dts_critic.models.header import DefinitelyTypedHeader

logger = logging.getLogger(__name__)

TITLE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^//\s*Type definitions for (non-npm package )?(.+?)\s+(\d+)\.(\d+)(?:\.\d+)?\s*$"
)
PROJECT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^//\s*Project:\s*(.+?)\s*$")
TYPESCRIPT_VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^//\s*(?:Minimum\s+)?TypeScript Version:\s*(\d+\.\d+)\s*$"
)


def parse_header_or_fail(text: str) -> DefinitelyTypedHeader:
    """Parse the Definitely Typed header at the top of a declaration.

    Only the leading comment block is read. The first line must name the
    library and its ``major.minor`` version; ``Project`` and ``TypeScript
    Version`` lines are optional.

    Raises:
        HeaderParseError: If the first line is not a valid header title.
    """

    lines = text.lstrip("\ufeff").splitlines()
    if not lines:
        raise HeaderParseError("Declaration is empty, expected a header", line=1)

    title = TITLE_PATTERN.match(lines[0].strip())
    if title is None:
        raise HeaderParseError(
            "First line must look like '// Type definitions for <name> <major>.<minor>'",
            line=1,
        )

    projects: list[str] = []
    typescript_version: str | None = None
    for line in lines[1:]:
        stripped = line.strip()
        if not stripped.startswith("//"):
            break
        project = PROJECT_PATTERN.match(stripped)
        if project is not None:
            projects.extend(url.strip() for url in project.group(1).split(",") if url.strip())
            continue
        ts_version = TYPESCRIPT_VERSION_PATTERN.match(stripped)
        if ts_version is not None:
            typescript_version = ts_version.group(1)

    return DefinitelyTypedHeader(
        library_name=title.group(2),
        library_major_version=int(title.group(3)),
        library_minor_version=int(title.group(4)),
        non_npm=title.group(1) is not None,
        projects=projects,
        typescript_version=typescript_version,
    )


def parse_header(text: str) -> DefinitelyTypedHeader | None:
    try:
        return parse_header_or_fail(text)
    except HeaderParseError as exc:
        logger.debug("No usable header: %s", exc.message)
        return None
