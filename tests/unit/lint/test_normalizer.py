import json

from src.core.models import Severity
from src.lint.normalizer import normalize_report, read_report, relative_path

ROOT = "/tmp/lintflow-abc/repo"


def test_relative_path_strips_root_and_separator() -> None:
    assert relative_path(f"{ROOT}/src/a.js", ROOT) == "src/a.js"
    assert relative_path(f"{ROOT}/src/a.js", f"{ROOT}/") == "src/a.js"


def test_relative_path_leaves_foreign_paths_untouched() -> None:
    assert relative_path("/elsewhere/a.js", ROOT) == "/elsewhere/a.js"


def test_normalize_report_flattens_messages_in_report_order() -> None:
    report = [
        {
            "filePath": f"{ROOT}/b.js",
            "messages": [
                {"message": "Missing semicolon.", "ruleId": "semi", "line": 3, "column": 9, "severity": 2},
                {"message": "Unexpected console.", "ruleId": "no-console", "line": 1, "column": 1, "severity": 1},
            ],
        },
        {"filePath": f"{ROOT}/clean.js", "messages": []},
        {
            "filePath": f"{ROOT}/src/a.js",
            "messages": [
                {
                    "message": "'x' is defined but never used.",
                    "ruleId": "no-unused-vars",
                    "line": 2,
                    "column": 7,
                    "endLine": 2,
                    "endColumn": 8,
                    "severity": 2,
                }
            ],
        },
    ]

    violations = normalize_report(report, ROOT)

    assert [(v.file_path, v.rule_id) for v in violations] == [
        ("b.js", "semi"),
        ("b.js", "no-console"),
        ("src/a.js", "no-unused-vars"),
    ]
    assert violations[0].severity == Severity.ERROR
    assert violations[1].severity == Severity.WARNING
    assert (violations[2].end_line, violations[2].end_column) == (2, 8)


def test_missing_end_position_falls_back_to_start() -> None:
    report = [{"filePath": f"{ROOT}/a.js", "messages": [{"message": "m", "line": 4, "column": 2, "severity": 1}]}]

    (violation,) = normalize_report(report, ROOT)

    assert (violation.start_line, violation.start_column) == (4, 2)
    assert (violation.end_line, violation.end_column) == (4, 2)
    assert violation.rule_id is None


def test_message_without_position_is_anchored_at_file_start() -> None:
    report = [
        {
            "filePath": f"{ROOT}/ignored.js",
            "messages": [{"message": "File ignored because of a matching ignore pattern.", "severity": 1}],
        }
    ]

    (violation,) = normalize_report(report, ROOT)

    assert (violation.start_line, violation.start_column, violation.end_line, violation.end_column) == (1, 1, 1, 1)


def test_read_report_missing_file_is_empty(tmp_path) -> None:
    assert read_report(tmp_path / "eslintreport-abc1234.json", tmp_path) == []


def test_read_report_parses_file(tmp_path) -> None:
    report_file = tmp_path / "report.json"
    messages = [{"message": "m", "line": 1, "column": 1, "severity": 2}]
    report_file.write_text(json.dumps([{"filePath": str(tmp_path / "a.js"), "messages": messages}]))

    (violation,) = read_report(report_file, tmp_path)

    assert violation.file_path == "a.js"
