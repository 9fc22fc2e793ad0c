from pathlib import Path

DTS_SUFFIX = ".d.ts"


def find_dts_name(dts_path: str | Path) -> str:
    """Find the package name of a declaration file.

    If the file is called ``index.d.ts`` (as on Definitely Typed), the name of
    the parent directory is used instead.
    """

    resolved: Path = Path(dts_path).resolve()
    base_name: str = resolved.name
    if base_name.endswith(DTS_SUFFIX):
        base_name = base_name[: -len(DTS_SUFFIX)]
    if base_name and base_name != "index":
        return base_name
    return resolved.parent.name


def find_source_name(source_path: str | Path) -> str:
    resolved: Path = Path(source_path).resolve()
    return resolved.parent.name if resolved.suffix else resolved.name


def dt_to_npm_name(base_name: str) -> str:
    """Translate a Definitely Typed name to an npm name (``babel__core`` -> ``@babel/core``)."""

    if "__" in base_name:
        return "@" + base_name.replace("__", "/", 1)
    return base_name
