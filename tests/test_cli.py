"""Tests for the apiskel command line."""

import tempfile
from pathlib import Path

import yaml
from click.testing import CliRunner

from apiskel import __version__
from apiskel.cli import main


def _write_module(directory: Path, name: str, version: str = "1.0.0.0", **extra) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.yaml"
    with open(path, "w") as f:
        yaml.dump({"module": {"name": name, "version": version}, **extra}, f)
    return path


def _subject(directory: Path, references: list[str]) -> Path:
    return _write_module(
        directory,
        "Widgets",
        references=references,
        namespaces=[
            {
                "name": "Widgets",
                "types": [
                    {
                        "name": "Button",
                        "base": "Controls.Control",
                        "members": [
                            {"kind": "constructor"},
                            {"kind": "method", "name": "Click"},
                            {"kind": "method", "name": "Secret", "accessibility": "private"},
                        ],
                    }
                ],
            }
        ],
    )


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_to_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        subject = _subject(root / "src", ["Controls, Version=1.0.0.0"])
        _write_module(root / "refs", "Controls")
        out = root / "Widgets.cs"

        result = CliRunner().invoke(
            main, ["generate", str(subject), "--references", str(root / "refs"), "--output", str(out)]
        )

        assert result.exit_code == 0, result.output
        assert out.read_text() == (
            "namespace Widgets\n"
            "{\n"
            "    public class Button : Controls.Control\n"
            "    {\n"
            "        public Button() { }\n"
            "        public void Click() { }\n"
            "    }\n"
            "}\n"
        )


def test_generate_to_stdout():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        subject = _subject(root / "src", [])

        result = CliRunner().invoke(main, ["generate", str(subject)])

        assert result.exit_code == 0, result.output
        assert "namespace Widgets" in result.output
        assert "Secret" not in result.output


def test_generate_accepts_directory_of_modules():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _subject(root / "src", [])
        out = root / "out.cs"

        result = CliRunner().invoke(main, ["generate", str(root / "src"), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "public class Button" in out.read_text()


def test_generate_with_no_modules_fails():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(main, ["generate", str(Path(tmpdir) / "nothing")])
        assert result.exit_code == 1
        assert "No modules were found" in result.output


def test_unresolved_reference_is_a_warning_by_default():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        subject = _subject(root / "src", ["Missing, Version=1.0.0.0"])
        out = root / "out.cs"

        result = CliRunner().invoke(main, ["generate", str(subject), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "Could not resolve" in result.output
        assert out.exists()


def test_unresolved_reference_fails_in_strict_mode():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        subject = _subject(root / "src", ["Missing, Version=1.0.0.0"])
        out = root / "out.cs"

        result = CliRunner().invoke(main, ["generate", str(subject), "--strict", "-o", str(out)])

        assert result.exit_code == 1
        assert not out.exists()


def test_broken_reference_is_fatal():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        subject = _subject(root / "src", ["Controls"])
        refs = root / "refs"
        refs.mkdir()
        (refs / "Controls.yaml").write_text("- not\n- a mapping\n")
        out = root / "out.cs"

        result = CliRunner().invoke(
            main, ["generate", str(subject), "--references", str(refs), "-o", str(out)]
        )

        assert result.exit_code == 1
        assert "error:" in result.output
        assert not out.exists()


def test_resolve_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_module(root / "refs", "Controls", "1.2.0.0")

        result = CliRunner().invoke(
            main, ["resolve", "Controls, Version=1.0.0.0", "--references", str(root / "refs")]
        )

        assert result.exit_code == 0, result.output
        assert "Controls" in result.output
        assert "Found 'Controls' with version '1.2.0.0'" in result.output


def test_resolve_command_reports_missing():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(main, ["resolve", "Nowhere", "--references", tmpdir])
        assert result.exit_code == 1
        assert "missing" in result.output


def test_resolve_command_reports_each_mismatch_once():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_module(root / "refs", "Controls", "1.2.0.0")

        result = CliRunner().invoke(
            main, ["resolve", "Controls, Version=1.0.0.0", "--references", str(root / "refs")]
        )

        assert result.exit_code == 0, result.output
        assert "mismatch" in result.output
        assert result.output.count("Found 'Controls' with version '1.2.0.0'") == 1
