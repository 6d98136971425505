"""
Tests for the Unity build service — argument assembly and lifecycle.
"""

import io
from pathlib import Path

import pytest

from unity_runner.core.models.build import AgentConfiguration, BuildContext, InvocationState
from unity_runner.core.models.parameters import FeatureParameters, RunnerParameters
from unity_runner.core.services.build_logger import BuildLogger
from unity_runner.core.services.build_service import UnityRunnerBuildService
from unity_runner.core.services.tool_provider import ToolNotFoundError, UnityToolProvider


@pytest.fixture
def console() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    d = tmp_path / "checkout"
    d.mkdir()
    return d


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path / "buildTmp"


def _service(provider, console, system="Linux") -> UnityRunnerBuildService:
    return UnityRunnerBuildService(
        provider, build_logger=BuildLogger(console), system=system, tail_delay=0.01,
    )


def _context(workdir: Path, temp_dir: Path, feature=None, **runner) -> BuildContext:
    return BuildContext(
        working_directory=str(workdir),
        build_id="42",
        temp_directory=str(temp_dir),
        runner=RunnerParameters(**runner),
        feature=feature,
    )


def _value_after(args: list[str], flag: str) -> str:
    return args[args.index(flag) + 1]


# ── Argument assembly ────────────────────────────────────────────────


class TestArguments:
    def test_minimal(self, provider, console, workdir, temp_dir, tmp_path):
        cmd = _service(provider, console).make_command_line(_context(workdir, temp_dir))

        assert cmd.executable == str(tmp_path / "Unity-2020.1.0f1" / "Editor" / "Unity")
        assert cmd.arguments == ["-batchmode", "-projectPath", str(workdir), "-quit", "-logFile"]
        assert cmd.working_directory == str(workdir)

    def test_relative_project_path(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, project_path=" game ")
        )
        assert _value_after(cmd.arguments, "-projectPath") == str(workdir / "game")

    def test_absolute_project_path(self, provider, console, workdir, temp_dir, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, project_path=str(elsewhere))
        )
        assert _value_after(cmd.arguments, "-projectPath") == str(elsewhere)

    def test_build_target(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, build_target="StandaloneLinux64")
        )
        assert _value_after(cmd.arguments, "-buildTarget") == "StandaloneLinux64"

    def test_build_player(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        cmd = service.make_command_line(
            _context(workdir, temp_dir, build_player="buildLinux64Player", build_player_path="out/game")
        )
        assert _value_after(cmd.arguments, "-buildLinux64Player") == str(workdir / "out" / "game")
        assert service.spec.output_player_path == str(workdir / "out" / "game")

    def test_build_player_absolute_path(self, provider, console, workdir, temp_dir, tmp_path):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, build_player="buildOSXPlayer", build_player_path=str(tmp_path / "p"))
        )
        assert _value_after(cmd.arguments, "-buildOSXPlayer") == str(tmp_path / "p")

    @pytest.mark.parametrize("player, path", [("buildLinux64Player", ""), ("", "out/game")])
    def test_build_player_needs_both(self, provider, console, workdir, temp_dir, player, path):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, build_player=player, build_player_path=path)
        )
        assert not any(a.startswith("-build") and a.endswith("Player") for a in cmd.arguments)

    def test_no_graphics_and_execute_method(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, no_graphics=True, execute_method=" Builder.Build ")
        )
        args = cmd.arguments
        assert "-nographics" in args
        assert _value_after(args, "-executeMethod") == "Builder.Build"
        assert args.index("-nographics") < args.index("-executeMethod")

    def test_extra_arguments_tokenized(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, arguments='-define "A B" -path C:\\Out\\dir')
        )
        args = cmd.arguments
        start = args.index("-define")
        assert args[start:start + 4] == ["-define", "A B", "-path", "C:\\Out\\dir"]
        assert args[start + 4:] == ["-quit", "-logFile"]

    def test_argument_order(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(_context(
            workdir, temp_dir,
            build_target="Android",
            build_player="buildLinux64Player",
            build_player_path="out",
            no_graphics=True,
            execute_method="M.Run",
            arguments="-custom",
        ))
        flags = [a for a in cmd.arguments if a.startswith("-")]
        assert flags == [
            "-batchmode", "-projectPath", "-buildTarget", "-buildLinux64Player",
            "-nographics", "-executeMethod", "-custom", "-quit", "-logFile",
        ]


# ── Tests mode ───────────────────────────────────────────────────────


class TestRunTests:
    def test_quit_without_tests(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        cmd = service.make_command_line(_context(workdir, temp_dir))
        assert "-quit" in cmd.arguments
        assert "-editorTestsResultFile" not in cmd.arguments
        assert service.tests_report_file is None

    def test_report_file_created(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        cmd = service.make_command_line(_context(workdir, temp_dir, run_editor_tests=True))

        args = cmd.arguments
        assert "-quit" not in args
        assert "-runEditorTests" in args
        report = Path(_value_after(args, "-editorTestsResultFile"))
        assert report.parent == temp_dir
        assert report.name.startswith("unityTestResults-")
        assert report.name.endswith("-42.xml")
        assert report.exists()
        assert service.tests_report_file == report

    def test_user_report_path_reused(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        cmd = service.make_command_line(_context(
            workdir, temp_dir,
            run_editor_tests=True,
            arguments="-editorTestsResultFile results/mine.xml",
        ))
        assert cmd.arguments.count("-editorTestsResultFile") == 1
        assert _value_after(cmd.arguments, "-editorTestsResultFile") == "results/mine.xml"
        assert service.tests_report_file == workdir / "results" / "mine.xml"
        assert not temp_dir.exists() or not list(temp_dir.glob("unityTestResults-*"))

    def test_run_tests_from_extra_arguments(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        cmd = service.make_command_line(_context(workdir, temp_dir, arguments="-runEditorTests"))
        assert "-quit" not in cmd.arguments
        assert "-editorTestsResultFile" in cmd.arguments

    def test_filters_and_platform(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        cmd = service.make_command_line(_context(
            workdir, temp_dir,
            run_editor_tests=True,
            test_platform="editmode",
            test_categories="Fast, Smoke\nSlow",
            test_names="A.Test;B.Test",
        ))
        args = cmd.arguments
        assert _value_after(args, "-testPlatform") == "editmode"
        assert _value_after(args, "-editorTestsCategories") == "Fast,Smoke,Slow"
        assert _value_after(args, "-editorTestsFilter") == "A.Test,B.Test"
        assert service.spec.test_filters == ["Fast", "Smoke", "Slow", "A.Test", "B.Test"]

    def test_filters_ignored_without_tests(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, test_categories="Fast", test_platform="editmode")
        )
        assert "-editorTestsCategories" not in cmd.arguments
        assert "-testPlatform" not in cmd.arguments

    def test_cache_server_from_feature(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(_context(
            workdir, temp_dir,
            feature=FeatureParameters(cache_server=" 10.0.0.5:8126 "),
            run_editor_tests=True,
        ))
        assert _value_after(cmd.arguments, "-CacheServerIPAddress") == "10.0.0.5:8126"


# ── Log file ─────────────────────────────────────────────────────────


@pytest.fixture
def old_provider(detector_factory, tmp_path: Path) -> UnityToolProvider:
    """Provider whose only editor is 2018.4.0."""
    tool_provider = UnityToolProvider.for_detector(
        detector_factory({"2018.4.0": str(tmp_path / "Unity-2018.4.0f1")})
    )
    tool_provider.load(AgentConfiguration())
    return tool_provider


class TestLogFile:
    def test_windows_old_editor_gets_log_file(self, old_provider, console, workdir, temp_dir):
        service = _service(old_provider, console, system="Windows")
        cmd = service.make_command_line(_context(workdir, temp_dir))

        log_path = _value_after(cmd.arguments, "-logFile")
        assert log_path
        assert Path(log_path) == service.log_file
        assert Path(log_path).name.startswith("unityBuildLog-")
        assert Path(log_path).name.endswith("-42.txt")

    def test_windows_new_editor_logs_to_stdout(self, provider, console, workdir, temp_dir):
        service = _service(provider, console, system="Windows")
        cmd = service.make_command_line(_context(workdir, temp_dir))
        assert cmd.arguments[-1] == "-logFile"
        assert service.log_file is None

    @pytest.mark.parametrize("system", ["Linux", "Darwin"])
    def test_other_os_old_editor_logs_to_stdout(self, old_provider, console, workdir, temp_dir, system):
        service = _service(old_provider, console, system=system)
        cmd = service.make_command_line(_context(workdir, temp_dir))
        assert cmd.arguments[-1] == "-logFile"

    def test_log_flag_after_test_flags(self, provider, console, workdir, temp_dir):
        cmd = _service(provider, console).make_command_line(
            _context(workdir, temp_dir, run_editor_tests=True)
        )
        assert cmd.arguments[-1] == "-logFile"


# ── Resolution errors ────────────────────────────────────────────────


class TestResolution:
    def test_missing_version_fails(self, provider, console, workdir, temp_dir):
        with pytest.raises(ToolNotFoundError):
            _service(provider, console).make_command_line(
                _context(workdir, temp_dir, unity_version="2030.1.0")
            )

    def test_virtual_context_uses_path_lookup(self, provider, console, workdir, temp_dir):
        ctx = _context(workdir, temp_dir)
        ctx.virtual_context = True
        cmd = _service(provider, console, system="Windows").make_command_line(ctx)
        assert cmd.executable == "unity"
        assert cmd.arguments[-1] == "-logFile"


# ── Lifecycle ────────────────────────────────────────────────────────


class TestLifecycle:
    def test_states(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        service.make_command_line(_context(workdir, temp_dir))
        assert service.state == InvocationState.NOT_STARTED

        service.before_process_started()
        assert service.state == InvocationState.STARTING
        service.process_started()
        assert service.state == InvocationState.RUNNING
        service.after_process_finished()
        assert service.state == InvocationState.FINISHED

    def test_no_tailer_without_log_file(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        service.make_command_line(_context(workdir, temp_dir))
        service.before_process_started()
        assert service.tailer is None
        service.after_process_finished()
        assert console.getvalue() == ""

    def test_tailed_lines_reach_console(self, old_provider, console, workdir, temp_dir):
        service = _service(old_provider, console, system="Windows")
        service.make_command_line(_context(workdir, temp_dir))

        service.before_process_started()
        assert service.tailer is not None and service.tailer.running
        service.log_file.write_text("Initialize engine\nCompiling scripts\n")
        service.after_process_finished()

        assert not service.tailer.running
        assert console.getvalue().splitlines() == ["Initialize engine", "Compiling scripts"]

    def test_import_report_message(self, provider, console, workdir, temp_dir):
        service = _service(provider, console)
        service.make_command_line(_context(workdir, temp_dir, run_editor_tests=True))
        service.before_process_started()
        service.after_process_finished()

        report = service.tests_report_file
        assert report.is_absolute()
        assert console.getvalue() == f"##teamcity[importData type='nunit' path='{report}']\n"

    def test_user_report_imported_from_working_directory(
        self, provider, console, workdir, temp_dir, tmp_path, monkeypatch,
    ):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        monkeypatch.chdir(elsewhere)

        service = _service(provider, console)
        cmd = service.make_command_line(_context(
            workdir, temp_dir,
            run_editor_tests=True,
            arguments="-editorTestsResultFile out.xml",
        ))
        service.before_process_started()
        service.after_process_finished()

        assert _value_after(cmd.arguments, "-editorTestsResultFile") == "out.xml"
        expected = workdir.absolute() / "out.xml"
        assert console.getvalue() == f"##teamcity[importData type='nunit' path='{expected}']\n"
