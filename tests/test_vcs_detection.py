"""Tests for repository detection and the subprocess helper."""

import subprocess
from unittest.mock import patch

import pytest

from constants import Backends
from errors import CommandError, RepositoryNotFound
from vcs import GitRepository, JujutsuRepository, detect_repository, find_repository_root
from vcs.process import run_command


class TestFindRepositoryRoot:
    """Walking up to the repository root."""

    def test_git_repository(self, tmp_path):
        (tmp_path / ".git").mkdir()
        assert find_repository_root(str(tmp_path)) == (str(tmp_path), Backends.GIT)

    def test_git_worktree_file(self, tmp_path):
        (tmp_path / ".git").write_text("gitdir: /elsewhere\n")
        assert find_repository_root(str(tmp_path))[1] == Backends.GIT

    def test_colocated_prefers_jujutsu(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / ".jj").mkdir()
        assert find_repository_root(str(tmp_path))[1] == Backends.JUJUTSU

    def test_explicit_backend(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / ".jj").mkdir()
        assert find_repository_root(str(tmp_path), "git")[1] == Backends.GIT

    def test_walks_up_from_subdirectory(self, tmp_path):
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "services" / "api"
        nested.mkdir(parents=True)
        assert find_repository_root(str(nested)) == (str(tmp_path), Backends.GIT)

    def test_not_found(self, tmp_path):
        with pytest.raises(RepositoryNotFound):
            find_repository_root(str(tmp_path))

    def test_explicit_backend_not_found(self, tmp_path):
        (tmp_path / ".git").mkdir()
        with pytest.raises(RepositoryNotFound) as exc:
            find_repository_root(str(tmp_path), "jj")
        assert "jj" in str(exc.value)


class TestDetectRepository:
    """Backend selection."""

    def test_git(self, tmp_path):
        (tmp_path / ".git").mkdir()
        repo = detect_repository(str(tmp_path), remote="upstream")
        assert isinstance(repo, GitRepository)
        assert repo.remote == "upstream"
        assert repo.root == str(tmp_path)

    def test_jujutsu(self, tmp_path):
        (tmp_path / ".jj").mkdir()
        assert isinstance(detect_repository(str(tmp_path)), JujutsuRepository)


class TestRunCommand:
    """Subprocess wrapper behavior."""

    @patch("vcs.process.subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["git"], 0, "ok\n", "")
        result = run_command(["git", "status"], cwd="/repo")
        assert result.stdout == "ok\n"
        mock_run.assert_called_once()
        assert mock_run.call_args[0][0] == ["git", "status"]
        kwargs = mock_run.call_args[1]
        assert kwargs["cwd"] == "/repo"
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False

    @patch("vcs.process.subprocess.run")
    def test_forces_untranslated_messages(self, mock_run, monkeypatch):
        monkeypatch.setenv("LANG", "de_DE.UTF-8")
        monkeypatch.setenv("LC_ALL", "de_DE.UTF-8")
        mock_run.return_value = subprocess.CompletedProcess(["git"], 0, "", "")
        run_command(["git", "tag", "-a", "v1.0.0"])
        env = mock_run.call_args[1]["env"]
        assert env["LC_ALL"] == "C"
        assert env["LANG"] == "de_DE.UTF-8"

    @patch("vcs.process.subprocess.run")
    def test_failure_raises_when_checked(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["git"], 128, "", "fatal: bad\n")
        with pytest.raises(CommandError) as exc:
            run_command(["git", "tag", "x"])
        assert exc.value.returncode == 128
        assert exc.value.stderr == "fatal: bad"

    @patch("vcs.process.subprocess.run")
    def test_failure_returned_when_unchecked(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["git"], 1, "", "")
        assert run_command(["git", "rev-parse"], check=False).returncode == 1

    @patch("vcs.process.subprocess.run")
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError("No such file or directory: 'jj'")
        with pytest.raises(CommandError) as exc:
            run_command(["jj", "log"])
        assert exc.value.returncode is None
        assert "could not run 'jj'" in str(exc.value)
