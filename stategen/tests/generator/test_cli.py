"""Tests for CLI interface."""

import json
import tempfile
from pathlib import Path

from click.testing import CliRunner

from stategen.generator.cli import cli


def describe_gen_command():
    def generates_modules(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["gen", "-m", "stategen.tests.definitions", "-o", tmpdir])
            expect(result.exit_code) == 0

            path = Path(tmpdir) / "stategen" / "tests" / "main_state_gen.py"
            expect(path.exists()) == True
            content = path.read_text()
            expect("class MainStateDelegate(MainStateClient):" in content) == True
            expect("class MainStateFactory(StateFactory[MainStateDelegate]):" in content) == True

    def generates_flat_output(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(
                cli,
                [
                    "gen",
                    "-m",
                    "stategen.tests.definitions",
                    "-o",
                    tmpdir,
                    "--flat",
                    "--runtime-import",
                    "stategen_runtime",
                ],
            )
            expect(result.exit_code) == 0
            content = (Path(tmpdir) / "counter_state_gen.py").read_text()
            expect("from stategen_runtime import (" in content) == True

    def fails_when_a_definition_fails(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(
                cli,
                [
                    "gen",
                    "-m",
                    "stategen.tests.definitions",
                    "-m",
                    "stategen.tests.broken_definitions",
                    "-o",
                    tmpdir,
                ],
            )
            expect(result.exit_code) == 1
            expect("2 definition(s) failed" in result.output) == True
            expect((Path(tmpdir) / "stategen" / "tests" / "main_state_gen.py").exists()) == True

    def reads_options_from_environment(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(
                cli,
                ["gen", "-m", "stategen.tests.definitions"],
                auto_envvar_prefix="STATEGEN",
                env={"STATEGEN_GEN_OUTPUT_DIR": tmpdir},
            )
            expect(result.exit_code) == 0
            expect((Path(tmpdir) / "stategen" / "tests" / "empty_state_gen.py").exists()) == True

    def requires_all_options(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["gen", "-m", "stategen.tests.definitions"])
        expect(result.exit_code) != 0
        expect("Missing option" in result.output) == True


def describe_runtime_command():
    def generates_python_runtime(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["runtime", "-o", tmpdir])
            expect(result.exit_code) == 0

            runtime_dir = Path(tmpdir) / "stategen_runtime"
            expect((runtime_dir / "__init__.py").exists()) == True
            expect((runtime_dir / "snapshot.py").exists()) == True

    def uses_custom_folder_name(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["runtime", "-o", tmpdir, "--name", "rt"])
            expect(result.exit_code) == 0
            expect((Path(tmpdir) / "rt" / "channel.py").exists()) == True


def describe_info_command():
    def shows_properties(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-m", "stategen.tests.definitions"])
        expect(result.exit_code) == 0
        expect("MainState" in result.output) == True
        expect("toast" in result.output) == True
        expect("MainViewModel" in result.output) == True

    def outputs_json(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-m", "stategen.tests.definitions", "--json"])
        expect(result.exit_code) == 0

        schemas = json.loads(result.output)
        expect([s["definition"]["name"] for s in schemas]) == [
            "MainState",
            "CounterState",
            "EmptyState",
            "ScheduleState",
        ]
        expect(schemas[0]["has_persisted"]) == True
        expect([p["name"] for p in schemas[0]["properties"]]) == ["city", "name", "other", "toast"]

    def reports_broken_definitions(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-m", "stategen.tests.broken_definitions"])
        expect(result.exit_code) == 1
        expect("Error:" in result.output) == True

    def fails_on_unknown_module(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-m", "stategen.tests.no_such_module"])
        expect(result.exit_code) != 0


def describe_parse_type_command():
    def shows_type_tree(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse-type", "Map<String, List<Int>?>"])
        expect(result.exit_code) == 0
        expect("Map" in result.output) == True
        expect("dict[str, list[int] | None]" in result.output) == True

    def outputs_json(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse-type", "List<Int>?", "--json"])
        expect(result.exit_code) == 0
        data = json.loads(result.output)
        expect(data["qualified_name"]) == "List"
        expect(data["nullable"]) == True
        expect(data["type_arguments"][0]["qualified_name"]) == "Int"

    def reports_parse_errors(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse-type", "Map<String"])
        expect(result.exit_code) == 1
        expect("Parse error: Unmatched '<'" in result.output) == True
