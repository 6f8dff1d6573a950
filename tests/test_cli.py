"""
Tests for the CLI — argument conventions, exit codes, end-to-end runs.
"""

from pathlib import Path

from click.testing import CliRunner

from pds4gen import __version__
from pds4gen.main import cli, parsed_options

EXPECTED = '<product id="TEST_PRODUCT_001" target="MARS" lines="512"/>\n'


class TestCLIGlobal:
    """Tests for help, version and the no-argument hint."""

    def test_no_args(self):
        runner = CliRunner()
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Type 'pds4gen -h' for usage" in result.output

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-h"])
        assert result.exit_code == 0
        assert "Usage: pds4gen <options>" in result.output
        assert "--pds3" in result.output
        assert "[required]" in result.output

    def test_help_long(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "--template" in result.output

    def test_help_bypasses_validation(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(tmp_path / "missing.lbl"), "-h"])
        assert result.exit_code == 0
        assert "does not exist" not in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-V"])
        assert result.exit_code == 0
        assert __version__ in result.output
        assert "Release Date:" in result.output


class TestCLIErrors:
    """Every failure is one message and exit code 1."""

    def test_unknown_option(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-x"])
        assert result.exit_code == 1
        assert "Command-line parse failure" in result.output

    def test_option_missing_value(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-p"])
        assert result.exit_code == 1
        assert "Command-line parse failure" in result.output

    def test_stray_argument(self, label_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "extra"])
        assert result.exit_code == 1
        assert "Command-line parse failure" in result.output

    def test_missing_label_flag(self, template_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-t", str(template_file)])
        assert result.exit_code == 1
        assert "Missing -p flag.  PDS3 label must be specified." in result.output

    def test_missing_template_flag(self, label_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file)])
        assert result.exit_code == 1
        assert "Missing -t flag.  Template file must be specified." in result.output

    def test_missing_label_file(self, template_file: Path, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", "missing.lbl", "-t", str(template_file)])
        assert result.exit_code == 1
        assert "PDS3 Label does not exist: missing.lbl" in result.output

    def test_empty_output_value(self, label_file: Path, template_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "-t", str(template_file), "-o", ""])
        assert result.exit_code == 1
        assert "Output file name must not be empty." in result.output
        assert "validation error" not in result.output

    def test_render_failure(self, label_file: Path, tmp_path: Path):
        template = tmp_path / "bad.j2"
        template.write_text("{{ UNDEFINED_THING }}")
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "-t", str(template)])
        assert result.exit_code == 1
        assert "UNDEFINED_THING" in result.output


class TestCLIGenerate:
    """Successful runs."""

    def test_stdout(self, label_file: Path, template_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "-t", str(template_file)])
        assert result.exit_code == 0, result.output
        assert EXPECTED in result.output

    def test_output_file(self, label_file: Path, template_file: Path, tmp_path: Path):
        out = tmp_path / "out.xml"
        runner = CliRunner()
        result = runner.invoke(cli, ["--pds3", str(label_file), "--template", str(template_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text() == EXPECTED
        assert EXPECTED not in result.output

    def test_relative_paths(self, label_file: Path, template_file: Path, monkeypatch):
        monkeypatch.chdir(label_file.parent)
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", label_file.name, "-t", template_file.name, "-o", "rel.xml"])
        assert result.exit_code == 0, result.output
        assert (label_file.parent / "rel.xml").read_text() == EXPECTED

    def test_file_flag_reaches_template(self, label_file: Path, tmp_path: Path):
        template = tmp_path / "f.j2"
        template.write_text("{{ file_path }}")
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "-t", str(template), "-f", "data/IMG_001.IMG"])
        assert result.exit_code == 0, result.output
        assert "data/IMG_001.IMG" in result.output

    def test_config_dir(self, label_file: Path, tmp_path: Path):
        conf = tmp_path / "conf"
        conf.mkdir()
        (conf / "header.j2").write_text("HEADER {{ TARGET_NAME }}")
        template = tmp_path / "main.j2"
        template.write_text('{% include "header.j2" %}')
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "-t", str(template), "-c", str(conf)])
        assert result.exit_code == 0, result.output
        assert "HEADER MARS" in result.output

    def test_default_config_dir_macros(self, label_file: Path, tmp_path: Path):
        template = tmp_path / "m.j2"
        template.write_text('{% import "pds4_macros.j2" as pds4 %}{{ pds4.element("target", TARGET_NAME) }}')
        runner = CliRunner()
        result = runner.invoke(cli, ["-p", str(label_file), "-t", str(template)])
        assert result.exit_code == 0, result.output
        assert "<target>MARS</target>" in result.output

    def test_verbose_logs_do_not_break_output(self, label_file: Path, template_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-v", "-p", str(label_file), "-t", str(template_file)])
        assert result.exit_code == 0, result.output
        assert EXPECTED in result.output


class TestParsedOptions:
    def test_only_supplied_flags(self, catalog):
        params = {"h": False, "p": "a.lbl", "t": None, "o": "out.xml", "v": True}
        assert parsed_options(catalog, params) == {"p": "a.lbl", "o": "out.xml", "v": True}
