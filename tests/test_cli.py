"""CLI behaviour tests."""

from __future__ import annotations

import pytest

from tests._fixtures.project_builder import ProjectBuilder
from tsexport.cli import _build_parser, main
from tsexport.logging import configure_logging

SCHEMA = """
namespace: Shop.Models
declarations:
  - name: Order
    members:
      - {name: Id, type: int}
  - name: IShape
    kind: interface
    members: []
"""


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "export"])
    assert args.verbose is True
    assert args.command == "export"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["export", "--verbose"])
    assert args.verbose is True
    assert args.command == "export"


def test_cli_export_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["export", "proj", "-o", "web/models", "--source", "Models", "--source", "Contracts", "--dry-run", "--fail-fast"]
    )
    assert args.path == "proj"
    assert args.output == "web/models"
    assert args.sources == ["Models", "Contracts"]
    assert args.dry_run is True
    assert args.fail_fast is True


def test_cli_defaults_to_current_directory() -> None:
    parser = _build_parser()
    args = parser.parse_args(["list"])
    assert args.path == "."
    assert args.sources is None
    assert args.verbose is False


def test_main_export_writes_files(project: ProjectBuilder, capsys) -> None:
    project.write({"models.tsexport.yml": SCHEMA})
    output = project.path() / "ts"

    main(["export", str(project.path()), "--output", str(output)])

    captured = capsys.readouterr()
    assert "Exported 2 file(s)" in captured.out
    assert "(2 changed)" in captured.out
    assert (output / "Shop" / "Models" / "Order.ts").exists()
    assert (output / "Shop" / "Models" / "IShape.ts").exists()


def test_main_export_dry_run_prints_diff(project: ProjectBuilder, capsys) -> None:
    project.write({"models.tsexport.yml": SCHEMA})

    main(["export", str(project.path()), "--dry-run"])

    captured = capsys.readouterr()
    assert "Generated file changes (dry-run):" in captured.out
    assert "+export class Order {" in captured.out
    assert not (project.path() / "generated").exists()


def test_main_export_dry_run_reports_up_to_date(project: ProjectBuilder, capsys) -> None:
    project.write({"models.tsexport.yml": SCHEMA})
    main(["export", str(project.path())])
    capsys.readouterr()

    main(["export", str(project.path()), "--dry-run"])

    assert "Generated files already up to date (dry-run)" in capsys.readouterr().out


def test_main_list_prints_declarations(project: ProjectBuilder, capsys) -> None:
    project.write({"models.tsexport.yml": SCHEMA})

    main(["list", str(project.path())])

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "interface Shop.Models.IShape (0 members)",
        "class     Shop.Models.Order (1 members)",
    ]


def test_main_exits_for_missing_project(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["export", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "Project path not found" in capsys.readouterr().err


def test_main_exits_for_schema_errors(project: ProjectBuilder, capsys) -> None:
    project.write({"bad.tsexport.yml": "- not a mapping\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["export", str(project.path())])

    assert excinfo.value.code == 1
    assert "tsexport export failed" in capsys.readouterr().err


def test_main_exits_nonzero_when_declarations_fail(project: ProjectBuilder, capsys) -> None:
    project.write(
        {
            "models.tsexport.yml": SCHEMA,
            "broken.tsexport.yml": """
            declarations:
              - name: Shop.Broken
                members:
                  - {name: Maybe, type: Nullable}
            """,
        }
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["export", str(project.path())])

    captured = capsys.readouterr()
    assert excinfo.value.code == 1
    assert "Exported 2 file(s)" in captured.out
    assert "error: Cannot export Shop.Broken.Maybe" in captured.err
    assert "1 declaration(s) failed to export" in captured.err


def test_cli_accepts_log_file_before_or_after_command() -> None:
    parser = _build_parser()

    assert parser.parse_args(["export", "--log-file", "run.log"]).log_file == "run.log"
    assert parser.parse_args(["--log-file", "run.log", "list"]).log_file == "run.log"
    assert parser.parse_args(["list"]).log_file is None


def test_main_writes_log_file(project: ProjectBuilder, tmp_path) -> None:
    project.write({"models.tsexport.yml": SCHEMA})
    log_file = tmp_path / "logs" / "export.log"

    try:
        main(["export", str(project.path()), "--output", str(tmp_path / "ts"), "--log-file", str(log_file)])
        contents = log_file.read_text(encoding="utf-8")
    finally:
        configure_logging()

    assert "Starting export" in contents
