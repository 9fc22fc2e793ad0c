import json
from pathlib import Path
from typing import Any

from dts_critic.loaders.json_loader import JsonLoader
from dts_critic.models.base import SourcePosition
from dts_critic.models.diagnostic import CheckMode, Diagnostic, ErrorKind
from dts_critic.models.report import CriticReport


def _report() -> CriticReport:
    return CriticReport(
        name="pkg",
        declaration_path=Path("types/pkg/index.d.ts"),
        mode=CheckMode.NPM,
        diagnostics=[
            Diagnostic(
                kind=ErrorKind.DTS_PROPERTY_NOT_IN_JS,
                message="first line\nsecond line",
                position=SourcePosition(start=3, length=4),
            ),
            Diagnostic(kind=ErrorKind.JS_CALLABLE, message="callable"),
        ],
    )


def test_json_loader_writes_file(tmp_path: Path):
    out = tmp_path / "reports" / "report.json"
    loader = JsonLoader(out)
    loader.load(_report())

    assert out.exists(), "Output JSON file should be created"

    raw_obj: Any = json.loads(out.read_text(encoding="utf-8"))
    assert raw_obj["name"] == "pkg"
    assert raw_obj["declaration_path"] == str(Path("types/pkg/index.d.ts"))
    assert raw_obj["source_path"] is None
    assert raw_obj["mode"] == "npm"
    assert raw_obj["passed"] is False
    assert raw_obj["diagnostics"] == [
        {
            "kind": "DtsPropertyNotInJs",
            "message": "first line\nsecond line",
            "position": {"start": 3, "length": 4},
        },
        {"kind": "JsCallable", "message": "callable"},
    ]
