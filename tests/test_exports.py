from pathlib import Path

import pytest

from sizzle.exports import (
    ExportConfig,
    Exporter,
    ExportSettings,
    ExportsSettings,
    default_analysis_path,
    default_json_report_path,
    default_locations_line_format,
    default_locations_path,
)


def test_default_values():
    assert default_locations_line_format() == "{kind} {path}:{line}:{column} {message}"
    assert default_analysis_path() == Path("bacon-analysis.json")
    assert default_json_report_path() == Path("bacon-report.json")
    assert default_locations_path() == Path(".bacon-locations")


def test_export_config_from_mapping():
    config = ExportConfig.from_mapping(
        {"exporter": "JsonReport", "enabled": False, "path": "out.json"}
    )
    assert config == ExportConfig(Exporter.JSON_REPORT, False, Path("out.json"), None)
    assert ExportConfig.from_mapping({}) == ExportConfig()


def test_export_config_rejects_unknown_exporter():
    with pytest.raises(ValueError):
        ExportConfig.from_mapping({"exporter": "Nope"})


def test_named_exports_get_defaults_by_name():
    settings = ExportsSettings()
    settings.apply_config({"exports": {"analysis": {}, "json-report": {}, "locations": {}}})
    assert settings.exports["analysis"] == ExportSettings(
        Exporter.ANALYSIS, True, default_analysis_path(), ""
    )
    assert settings.exports["json-report"] == ExportSettings(
        Exporter.JSON_REPORT, True, default_json_report_path(), ""
    )
    assert settings.exports["locations"] == ExportSettings(
        Exporter.LOCATIONS, True, default_locations_path(), default_locations_line_format()
    )


def test_unknown_name_defaults_to_locations():
    settings = ExportsSettings()
    settings.apply_config({"exports": {"mine": {"auto": False}}})
    mine = settings.exports["mine"]
    assert mine.exporter is Exporter.LOCATIONS
    assert mine.auto is False
    assert mine.path == default_locations_path()


def test_existing_export_is_updated_partially():
    settings = ExportsSettings()
    settings.apply_config({"exports": {"locations": {}}})
    settings.apply_config({"exports": {"locations": {"line_format": "{path}"}}})
    locations = settings.exports["locations"]
    assert locations.line_format == "{path}"
    assert locations.path == default_locations_path()
    assert locations.auto is True


def test_export_config_objects_are_accepted():
    settings = ExportsSettings()
    settings.apply_config(
        {"exports": {"report": ExportConfig(exporter=Exporter.JSON_REPORT, path=Path("r.json"))}}
    )
    assert settings.exports["report"] == ExportSettings(
        Exporter.JSON_REPORT, True, Path("r.json"), ""
    )


def test_deprecated_export_table():
    settings = ExportsSettings()
    settings.apply_config({"export": {"exporter": "Analysis", "auto": False}})
    assert settings.exports["analysis"].auto is False
    assert settings.exports["analysis"].path == default_analysis_path()

    settings = ExportsSettings()
    settings.apply_config({"export": {"line_format": "{line}", "path": "locs"}})
    locations = settings.exports["locations"]
    assert locations.exporter is Exporter.LOCATIONS
    assert locations.line_format == "{line}"
    assert locations.path == Path("locs")


def test_deprecated_export_locations_flag():
    settings = ExportsSettings()
    settings.apply_config({"export_locations": False})
    assert settings.exports["locations"].auto is False
    assert settings.exports["locations"].path == default_locations_path()


def test_set_locations_export_auto():
    settings = ExportsSettings()
    settings.set_locations_export_auto(False)
    assert settings.exports["locations"].auto is False
    settings.set_locations_export_auto(True)
    assert settings.exports["locations"].auto is True
    assert list(settings.exports) == ["locations"]


def test_empty_config_changes_nothing():
    settings = ExportsSettings()
    settings.apply_config({})
    assert settings.exports == {}