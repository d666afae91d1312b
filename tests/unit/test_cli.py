import json

import pytest

from iam_import import cli
from iam_import.core import audit


@pytest.fixture()
def files(tmp_path):
    def write(name, document):
        path = tmp_path / name
        path.write_text(json.dumps(document))
        return str(path)
    return write


@pytest.fixture(autouse=True)
def cli_env(monkeypatch):
    monkeypatch.delenv("IMPORT_MAX_USERS", raising=False)
    monkeypatch.delenv("IMPORT_VALIDATE_RECORDS", raising=False)
    monkeypatch.delenv("AUDIT_ENABLED", raising=False)
    monkeypatch.setenv("IMPORT_LOG_LEVEL", "WARNING")


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_build_writes_request_to_stdout(files, capsys):
    users = files("users.json", [
        {"uid": "u1", "passwordHash": "AQID"},
        {"uid": "u2", "email": "broken"},
    ])
    options = files("options.json", {"hash": {"algorithm": "BCRYPT"}})

    assert cli.main(["build", users, "--options", options]) == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out) == {
        "users": [{"localId": "u1", "passwordHash": "AQID"}],
        "hashAlgorithm": "BCRYPT",
    }
    assert "1 succeeded, 1 failed" in captured.err


def test_build_without_validation(files, capsys):
    users = files("users.json", {"users": [{"uid": "u2", "email": "broken"}]})
    assert cli.main(["--no-validate", "build", users]) == 0
    assert json.loads(capsys.readouterr().out) == {"users": [{"localId": "u2", "email": "broken"}]}


def test_report_writes_output_file(files, tmp_path, capsys):
    users = files("users.json", [{"uid": "u0"}, {"uid": "u1", "passwordSalt": 3}, {"uid": "u2"}])
    failures = files("failures.json", {"error": [{"index": 1, "message": "duplicate"}]})
    output = tmp_path / "result.json"

    assert cli.main(["-o", str(output), "report", users, failures]) == 0
    result = json.loads(output.read_text())
    assert result["successCount"] == 1
    assert result["failureCount"] == 2
    assert [entry["index"] for entry in result["errors"]] == [1, 2]
    assert result["errors"][1]["error"] == {"code": "INVALID_USER_IMPORT", "message": "duplicate"}
    assert capsys.readouterr().out == ""


def test_hard_failure_exit_code(files, capsys):
    users = files("users.json", [{"uid": "u1", "passwordHash": "AQID"}])
    assert cli.main(["build", users]) == cli.EXIT_HARD_FAILURE
    assert "INVALID_ARGUMENT" in capsys.readouterr().err


@pytest.mark.parametrize(
    "document",
    [{"people": []}, "users"],
)
def test_malformed_users_file(files, document):
    assert cli.main(["build", files("users.json", document)]) == cli.EXIT_HARD_FAILURE


def test_missing_users_file(tmp_path):
    assert cli.main(["build", str(tmp_path / "absent.json")]) == cli.EXIT_HARD_FAILURE


def test_out_of_range_failure_index(files):
    users = files("users.json", [{"uid": "u0"}])
    failures = files("failures.json", [{"index": 5, "message": "x"}])
    assert cli.main(["report", users, failures]) == cli.EXIT_HARD_FAILURE


def test_max_users_from_environment(files, monkeypatch):
    monkeypatch.setenv("IMPORT_MAX_USERS", "1")
    users = files("users.json", [{"uid": "a"}, {"uid": "b"}])
    assert cli.main(["build", users]) == cli.EXIT_HARD_FAILURE


def test_runs_are_audited(files):
    users = files("users.json", [{"uid": "u1"}])
    assert cli.main(["--operator", "ops", "build", users]) == 0

    events = [json.loads(line) for line in audit.AUDIT_LOG_FILE.read_text().splitlines()]
    assert events[-1]["event_type"] == "import_build"
    assert events[-1]["operator"] == "ops"
    assert events[-1]["details"] == {"success_count": 1, "failure_count": 0, "hash_algorithm": None}
    assert audit.verify_audit_log() == (1, 1)
