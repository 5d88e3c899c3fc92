"""Tests for argument parsing and the CLI entry point."""

import os
from unittest.mock import MagicMock, patch

import pytest

from args import parse_args
from constants import Constants, ExitCodes
from engine import TagEngine, TagResult
from errors import (
    BackendFailure,
    CommandError,
    ConfigError,
    OperationAborted,
    PushError,
    RepositoryNotFound,
    TagSourceUnavailable,
)
from nutag import build_engine, main, run
from prompt import AutoAcceptPrompt, TerminalPrompt
from versioning.models import BumpKind, BumpRequest, ResolutionOutcome, Version

from conftest import FakeRepository


def _result(tag="v1.2.3", push_error=None):
    version = Version(1, 2, 3)
    return TagResult(tag=tag, version=version, target="HEAD",
                     outcome=ResolutionOutcome(version), pushed=push_error is None,
                     push_error=push_error)


def _fake_engine(result=None, error=None):
    engine = MagicMock()
    if error is not None:
        engine.run.side_effect = error
    else:
        engine.run.return_value = result or _result()
    settings = MagicMock(prefix=None)
    return engine, settings


class TestParseArgs:
    """Command line surface."""

    def test_defaults(self):
        args = parse_args([])
        assert not (args.MAJOR or args.MINOR or args.PATCH or args.PRERELEASE)
        assert args.BACKEND == "auto"
        assert args.YES is False
        assert args.NO_PUSH is False
        assert args.PREFIX is None
        assert args.LOG_LEVEL is None

    def test_all_flags(self):
        args = parse_args([
            "--minor", "--pre", "-p", "api", "-m", "Ship {tag}", "--no-push", "-y",
            "--remote", "upstream", "--backend", "JJ", "-C", "/work", "--token", "t",
            "-c", "cfg.yml", "--loglevel", "debug", "--logfile", "out.log",
        ])
        assert args.MINOR and args.PRERELEASE
        assert args.PREFIX == "api"
        assert args.MESSAGE == "Ship {tag}"
        assert args.NO_PUSH and args.YES
        assert args.REMOTE == "upstream"
        assert args.BACKEND == "jj"
        assert args.REPO == "/work"
        assert args.TOKEN == "t"
        assert args.CONFIG == "cfg.yml"
        assert args.LOG_LEVEL == "DEBUG"
        assert args.LOG_FILE == "out.log"

    def test_prerelease_alias(self):
        assert parse_args(["--prerelease"]).PRERELEASE is True

    def test_unknown_backend_rejected(self):
        with pytest.raises(SystemExit) as exc:
            parse_args(["--backend", "hg"])
        assert exc.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_args(["--version"])
        assert exc.value.code == 0
        assert Constants.VERSION in capsys.readouterr().out


class TestRunExitCodes:
    """Failures map onto documented exit codes."""

    @patch("nutag.build_engine")
    def test_success_prints_tag(self, mock_build, capsys):
        mock_build.return_value = _fake_engine(_result("api@v2.0.0"))
        assert run(parse_args(["--major"])) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out == "api@v2.0.0\n"
        engine = mock_build.return_value[0]
        assert engine.run.call_args[0][0] == BumpRequest(BumpKind.MAJOR)

    @patch("nutag.build_engine")
    def test_conflicting_bumps_are_usage_error(self, mock_build):
        assert run(parse_args(["--major", "--patch"])) == ExitCodes.USAGE_ERROR.value
        mock_build.assert_not_called()

    @pytest.mark.parametrize("error, code", [
        (ConfigError("bad config"), ExitCodes.USAGE_ERROR),
        (TagSourceUnavailable("HTTP 502"), ExitCodes.CONNECTION_ERROR),
        (OperationAborted("cancelled"), ExitCodes.ABORTED),
        (RepositoryNotFound("no repo"), ExitCodes.BACKEND_ERROR),
        (CommandError(["git"], 1, "boom"), ExitCodes.BACKEND_ERROR),
        (BackendFailure("v1.0.0", "disk full"), ExitCodes.BACKEND_ERROR),
    ])
    @patch("nutag.build_engine")
    def test_error_mapping(self, mock_build, error, code, capsys):
        mock_build.return_value = _fake_engine(error=error)
        assert run(parse_args([])) == code.value
        assert capsys.readouterr().out == ""

    @patch("nutag.build_engine")
    def test_build_failure_is_mapped(self, mock_build):
        mock_build.side_effect = RepositoryNotFound("not inside a repository")
        assert run(parse_args([])) == ExitCodes.BACKEND_ERROR.value

    @patch("nutag.build_engine")
    def test_push_failure_still_prints_tag(self, mock_build, capsys):
        error = PushError("v1.2.3", "origin", "rejected")
        mock_build.return_value = _fake_engine(_result(push_error=error))
        assert run(parse_args([])) == ExitCodes.PUSH_FAILED.value
        assert capsys.readouterr().out == "v1.2.3\n"

    @patch("builtins.input", return_value="")
    @patch("nutag.build_engine")
    def test_captured_stdout_holds_only_tag(self, mock_build, _mock_input, capsys):
        prompt = TerminalPrompt()

        def confirm_then_finish(request, prefix=None):
            prompt.ask("Tag to create", "v1.2.3")
            return _result()

        engine, settings = _fake_engine()
        engine.run.side_effect = confirm_then_finish
        mock_build.return_value = (engine, settings)

        assert run(parse_args([])) == ExitCodes.SUCCESS.value
        captured = capsys.readouterr()
        assert captured.out == "v1.2.3\n"
        assert "Tag to create [v1.2.3]: " in captured.err

    @patch("nutag.configure_logging", side_effect=PermissionError("Permission denied: '/root/x.log'"))
    def test_unwritable_log_file_is_usage_error(self, _mock_logging, caplog):
        with pytest.raises(SystemExit) as exc:
            main(["--logfile", "/root/x.log"])
        assert exc.value.code == ExitCodes.USAGE_ERROR.value
        assert "cannot open log file /root/x.log" in caplog.text

    @patch("nutag.configure_logging")
    @patch("nutag.run", return_value=ExitCodes.ABORTED.value)
    def test_main_exits_with_run_code(self, _mock_run, mock_logging, monkeypatch):
        monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "INFO")
        with pytest.raises(SystemExit) as exc:
            main(["--loglevel", "debug", "--logfile", "x.log"])
        assert exc.value.code == 130
        mock_logging.assert_called_once_with("x.log")
        assert os.environ[Constants.ENV_LOG_LEVEL] == "DEBUG"


class TestBuildEngine:
    """Wiring of settings, repository and tag source."""

    @pytest.fixture
    def wired(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_GITHUB_TOKEN, "ghp_envtoken")
        repo = FakeRepository()
        with patch("nutag.find_repository_root", return_value=("/repo", "git")) as find, \
                patch("nutag.detect_repository", return_value=repo) as detect:
            yield find, detect, repo

    def test_builds_engine(self, wired):
        find, detect, repo = wired
        engine, settings = build_engine(parse_args(["-C", "/repo/sub", "--remote", "upstream"]))
        assert isinstance(engine, TagEngine)
        assert engine.repository is repo
        assert engine.push is True
        assert isinstance(engine.prompt, TerminalPrompt)
        assert engine.tag_source.repository == "octo/widgets"
        assert engine.tag_source.client.token == "ghp_envtoken"
        assert settings.remote == "upstream"
        find.assert_called_once_with("/repo/sub", "auto")
        detect.assert_called_once_with("/repo", backend="auto", remote="upstream")

    def test_yes_and_no_push(self, wired):
        engine, _ = build_engine(parse_args(["-y", "--no-push", "-m", "Cut {version}"]))
        assert isinstance(engine.prompt, AutoAcceptPrompt)
        assert engine.push is False
        assert engine.message == "Cut {version}"

    def test_invalid_prefix(self, wired):
        with pytest.raises(ConfigError):
            build_engine(parse_args(["-p", "bad prefix"]))

    def test_invalid_message(self, wired):
        with pytest.raises(ConfigError):
            build_engine(parse_args(["-m", "Release {oops}"]))

    def test_non_github_remote(self, wired):
        _, _, repo = wired
        repo.remote_url = lambda: "https://gitlab.com/octo/widgets.git"
        with pytest.raises(TagSourceUnavailable):
            build_engine(parse_args([]))
