"""Configuration and settings of the exports of a job's results."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)


class Exporter(Enum):
    ANALYSIS = "Analysis"
    JSON_REPORT = "JsonReport"
    LOCATIONS = "Locations"


@dataclass
class ExportConfig:
    """The configuration of one export; unset values don't override anything."""

    exporter: Exporter | None = None
    auto: bool | None = None
    path: Path | None = None
    line_format: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ExportConfig:
        """Read a configuration table, "enabled" being accepted for "auto"."""
        exporter = data.get("exporter")
        if exporter is not None and not isinstance(exporter, Exporter):
            try:
                exporter = Exporter(exporter)
            except ValueError as e:
                raise ValueError(f"unknown exporter: {exporter!r}") from e
        auto = data.get("auto", data.get("enabled"))
        if auto is not None and not isinstance(auto, bool):
            raise ValueError(f"invalid auto value: {auto!r}")
        path = data.get("path")
        line_format = data.get("line_format")
        if line_format is not None and not isinstance(line_format, str):
            raise ValueError(f"invalid line format: {line_format!r}")
        return cls(
            exporter=exporter,
            auto=auto,
            path=Path(os.fspath(path)) if path is not None else None,
            line_format=line_format,
        )


@dataclass
class ExportSettings:
    """Settings for one export."""

    exporter: Exporter
    auto: bool
    path: Path
    line_format: str


def default_locations_line_format() -> str:
    return "{kind} {path}:{line}:{column} {message}"


def default_analysis_path() -> Path:
    return Path("bacon-analysis.json")


def default_json_report_path() -> Path:
    return Path("bacon-report.json")


def default_locations_path() -> Path:
    return Path(".bacon-locations")


def _default_analysis_export_settings() -> ExportSettings:
    return ExportSettings(Exporter.ANALYSIS, True, default_analysis_path(), "")


def _default_json_report_export_settings() -> ExportSettings:
    return ExportSettings(Exporter.JSON_REPORT, True, default_json_report_path(), "")


def _default_locations_export_settings() -> ExportSettings:
    return ExportSettings(
        Exporter.LOCATIONS,
        True,
        default_locations_path(),
        default_locations_line_format(),
    )


_DEFAULT_PATHS: dict[Exporter, Callable[[], Path]] = {
    Exporter.ANALYSIS: default_analysis_path,
    Exporter.JSON_REPORT: default_json_report_path,
    Exporter.LOCATIONS: default_locations_path,
}

_EXPORTERS_BY_NAME = {
    "analysis": Exporter.ANALYSIS,
    "json-report": Exporter.JSON_REPORT,
    "locations": Exporter.LOCATIONS,
}


def _as_export_config(value: ExportConfig | Mapping[str, Any]) -> ExportConfig:
    if isinstance(value, ExportConfig):
        return value
    return ExportConfig.from_mapping(value)


@dataclass
class ExportsSettings:
    """Settings of all exports, by name."""

    exports: dict[str, ExportSettings] = field(default_factory=dict)

    def _entry(
        self, name: str, default: Callable[[], ExportSettings]
    ) -> ExportSettings:
        return self.exports.setdefault(name, default()) if name not in self.exports else self.exports[name]

    def set_locations_export_auto(self, enabled: bool) -> None:
        self._entry("locations", _default_locations_export_settings).auto = enabled

    def apply_config(self, config: Mapping[str, Any]) -> None:
        """Apply the export parts of a configuration table.

        The current ``exports`` table is read, then the deprecated ``export``
        table and ``export_locations`` flag.
        """
        for name, raw in (config.get("exports") or {}).items():
            ec = _as_export_config(raw)
            existing = self.exports.get(name)
            if existing is not None:
                if ec.exporter is not None:
                    existing.exporter = ec.exporter
                if ec.auto is not None:
                    existing.auto = ec.auto
                if ec.path is not None:
                    existing.path = ec.path
                if ec.line_format is not None:
                    existing.line_format = ec.line_format
                continue
            exporter = ec.exporter
            if exporter is None:
                exporter = _EXPORTERS_BY_NAME.get(name)
                if exporter is None:
                    logger.warning(
                        "Exporter not specified for export %r, using 'locations'", name
                    )
                    exporter = Exporter.LOCATIONS
            if ec.line_format is not None:
                line_format = ec.line_format
            elif exporter is Exporter.LOCATIONS:
                line_format = default_locations_line_format()
            else:
                line_format = ""
            self.exports[name] = ExportSettings(
                exporter=exporter,
                auto=True if ec.auto is None else ec.auto,
                path=ec.path if ec.path is not None else _DEFAULT_PATHS[exporter](),
                line_format=line_format,
            )

        legacy = config.get("export")
        if legacy is not None:
            ec = _as_export_config(legacy)
            if ec.exporter is Exporter.ANALYSIS:
                settings = self._entry("analysis", _default_analysis_export_settings)
            elif ec.exporter is Exporter.JSON_REPORT:
                settings = self._entry("json-report", _default_json_report_export_settings)
            else:
                settings = self._entry("locations", _default_locations_export_settings)
                if ec.line_format is not None:
                    settings.line_format = ec.line_format
            if ec.auto is not None:
                settings.auto = ec.auto
            if ec.path is not None:
                settings.path = ec.path

        export_locations = config.get("export_locations")
        if export_locations is not None:
            self.set_locations_export_auto(bool(export_locations))