import logging
from pathlib import Path

import yaml

from dts_critic.loaders.json_loader import report_rows
from dts_critic.models.report import CriticReport

logger = logging.getLogger(__name__)


class _LiteralString(str):
    """Marker type to force YAML literal block style (|) for multi-line strings."""


def _literal_str_representer(dumper: yaml.SafeDumper, data: _LiteralString):  # type: ignore[name-defined]
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style="|")


yaml.SafeDumper.add_representer(_LiteralString, _literal_str_representer)  # type: ignore[arg-type]


class YamlLoader:
    """Persist a critic report as YAML.

    The schema mirrors the JSON loader. Diagnostic messages span several lines,
    so they are emitted as literal blocks (|).
    """

    def __init__(self, output_path: str | Path, indent: int = 2) -> None:
        self.output_path: Path = Path(output_path)
        self.indent: int = indent

    def load(self, report: CriticReport) -> None:
        """Write the report to the configured YAML file.

        Args:
            report: Report produced by the critic.
        """
        if self.output_path.parent and not self.output_path.parent.exists():
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        payload = report_rows(report)
        for row in payload["diagnostics"]:
            message = row.get("message")
            if isinstance(message, str) and "\n" in message:
                row["message"] = _LiteralString(message)

        try:
            with self.output_path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(
                    payload,
                    f,
                    allow_unicode=True,
                    sort_keys=False,
                    default_flow_style=False,
                    indent=self.indent,
                    width=4096,
                )
        except OSError:
            logger.exception("Failed to write critic report YAML to %s", self.output_path)
            raise
