import json
import logging
from pathlib import Path
from typing import Any

from dts_critic.models.report import CriticReport

logger = logging.getLogger(__name__)


def report_rows(report: CriticReport) -> dict[str, Any]:
    """Plain JSON-compatible view of a report, diagnostics without empty positions."""
    payload: dict[str, Any] = report.model_dump(mode="json", exclude={"diagnostics"})
    payload["passed"] = report.passed
    payload["diagnostics"] = [diagnostic.to_dict() for diagnostic in report.diagnostics]
    return payload


class JsonLoader:
    """Persist a critic report as JSON.

    The output JSON schema is a single object:

    {
      "name": "left-pad",
      "declaration_path": "types/left-pad/index.d.ts",
      "source_path": null,
      "mode": "npm",
      "passed": false,
      "diagnostics": [{"kind": "DtsPropertyNotInJs", "message": "...", "position": {...}}]
    }
    """

    def __init__(self, output_path: str | Path, indent: int = 2) -> None:
        """Create a JSON loader.

        Args:
            output_path: Target file path to write the JSON report into.
            indent: Indentation level for pretty-printing JSON.
        """
        self.output_path: Path = Path(output_path)
        self.indent: int = indent

    def load(self, report: CriticReport) -> None:
        if self.output_path.parent and not self.output_path.parent.exists():
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        payload = report_rows(report)

        try:
            with self.output_path.open("w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=self.indent)
        except OSError:
            logger.exception("Failed to write critic report JSON to %s", self.output_path)
            raise
