"""Structured logging and observability helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from fedimg.errors import FedimgError

Level = Literal["debug", "info", "warning", "error"]

_STAGE_OUTCOMES = {"stage_complete": "complete", "stage_failed": "failed"}


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        stage: str | None,
        message: str,
        resource: str | None = None,
        level: Level = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "stage": stage,
            "resource": resource,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)

    def record_error(
        self,
        error: FedimgError,
        *,
        operation: str,
        stage: str | None,
        message: str,
    ) -> None:
        """Log ``error`` with its code and context; the failing repo or script is the resource."""
        self.log(
            operation=operation,
            stage=stage,
            level="error",
            message=message,
            resource=error.context.get("repo") or error.context.get("script"),
            extra={"code": error.code, "context": dict(error.context)},
        )

    def stage_outcomes(self) -> dict[str, str]:
        """Map each stage seen so far to ``started``, ``complete`` or ``failed``."""
        outcomes: dict[str, str] = {}
        for record in self.records:
            operation, stage = record.get("operation"), record.get("stage")
            if stage is None or not str(operation).startswith("stage_"):
                continue
            outcomes[stage] = _STAGE_OUTCOMES.get(operation, "started")
        return outcomes

    def records_for_stage(self, stage: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("stage") == stage]

    def warnings(self) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("level") == "warning"]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
