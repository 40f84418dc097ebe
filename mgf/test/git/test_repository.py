"""Tests for mgf.git.repository module."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from mgf.core.config import FlowSettings, GitFlowConfig
from mgf.core.result import Err, Ok
from mgf.git.repository import Repository
from mgf.output.console import MockConsole
from mgf.platform.process import CommandRunner, Executable, MockCommandRunner

_DIFF = ["diff", "--no-ext-diff", "--ignore-submodules", "--quiet", "--exit-code"]
_DIFF_INDEX = ["diff-index", "--cached", "--quiet", "--ignore-submodules", "HEAD", "--"]


def _repo(
    git: MockCommandRunner,
    console: MockConsole | None = None,
    *,
    settings: FlowSettings | None = None,
    gitflow: GitFlowConfig | None = None,
) -> Repository:
    return Repository(
        git,
        gitflow=gitflow or GitFlowConfig(),
        settings=settings or FlowSettings(),
        console=console or MockConsole(),
    )


# =============================================================================
# Working tree state
# =============================================================================


class TestUncommittedChanges:
    def test_clean(self) -> None:
        git = MockCommandRunner()
        assert _repo(git).has_uncommitted_changes() == Ok(False)
        assert git.commands == [_DIFF, _DIFF_INDEX]

    def test_working_tree_changes_skip_index_check(self) -> None:
        git = MockCommandRunner()
        git.respond("diff", returncode=1)
        assert _repo(git).has_uncommitted_changes() == Ok(True)
        assert git.commands == [_DIFF]

    def test_index_changes(self) -> None:
        git = MockCommandRunner()
        git.respond("diff-index", returncode=1)
        assert _repo(git).has_uncommitted_changes() == Ok(True)

    def test_diff_error_with_diagnostic(self) -> None:
        git = MockCommandRunner()
        git.respond("diff-index", returncode=128, stderr="fatal: bad revision 'HEAD'\n")
        result = _repo(git).has_uncommitted_changes()
        assert isinstance(result, Err)
        assert result.error.message == "fatal: bad revision 'HEAD'"

    def test_unexpected_exit_without_diagnostic_counts_as_changes(self) -> None:
        git = MockCommandRunner()
        git.respond("diff", returncode=2)
        assert _repo(git).has_uncommitted_changes() == Ok(True)

    def test_check_uncommitted_changes(self) -> None:
        git = MockCommandRunner()
        git.respond("diff", returncode=1)
        console = MockConsole()
        result = _repo(git, console).check_uncommitted_changes()
        assert isinstance(result, Err)
        assert result.error.kind == "uncommitted_changes"
        assert result.error.message == "You have some uncommitted files."
        assert console.find("Checking for uncommitted changes.")


class TestBranchNames:
    def test_valid(self) -> None:
        git = MockCommandRunner()
        assert _repo(git).is_valid_branch_name("feature/login")
        assert git.commands == [["check-ref-format", "--allow-onelevel", "feature/login"]]

    def test_invalid(self) -> None:
        git = MockCommandRunner()
        git.respond("check-ref-format", returncode=1)
        assert not _repo(git).is_valid_branch_name("bad..name")


# =============================================================================
# Lookup
# =============================================================================


class TestFindBranches:
    def test_prefix_uses_recursive_wildcard(self) -> None:
        git = MockCommandRunner()
        git.respond("for-each-ref", stdout='"feature/a"\n"feature/b/c"\n')
        result = _repo(git).find_branches("feature/")
        assert result == Ok("feature/a\nfeature/b/c")
        assert git.commands == [
            ["for-each-ref", "--format=%(refname:short)", "refs/heads/feature/**"]
        ]

    def test_exact_name_uses_single_wildcard(self) -> None:
        git = MockCommandRunner()
        _repo(git).find_branches("develop", first_match=True)
        assert git.commands == [
            ["for-each-ref", "--count=1", "--format=%(refname:short)", "refs/heads/develop*"]
        ]

    def test_remote_branches_fetch_first(self) -> None:
        git = MockCommandRunner()
        _repo(git).fetch_and_find_remote_branches("origin", "release/")
        assert git.commands == [
            ["fetch", "--quiet", "origin"],
            ["for-each-ref", "--format=%(refname:short)", "refs/remotes/origin/release/**"],
        ]


class TestTags:
    def test_find_last_tag_strips_quotes_and_newlines(self) -> None:
        git = MockCommandRunner()
        git.respond("for-each-ref", stdout='"v2.0"\r\n')
        assert _repo(git).find_last_tag() == Ok("v2.0")
        assert git.commands[0][:4] == [
            "for-each-ref",
            "--sort=-version:refname",
            "--sort=-taggerdate",
            "--count=1",
        ]

    def test_find_tags(self) -> None:
        git = MockCommandRunner()
        git.respond("for-each-ref", stdout="1.0\n1.1\n")
        assert _repo(git).find_tags() == Ok("1.0\n1.1\n")

    def test_exists(self) -> None:
        git = MockCommandRunner()
        git.respond("show-ref", "--verify", "--quiet", "refs/tags/1.0", returncode=1)
        repo = _repo(git)
        assert not repo.tag_exists("1.0")
        assert repo.branch_exists("develop")
        assert git.commands[1] == ["show-ref", "--verify", "--quiet", "refs/heads/develop"]

    def test_current_branch(self) -> None:
        git = MockCommandRunner()
        git.respond("symbolic-ref", stdout="develop\n")
        assert _repo(git).current_branch() == Ok("develop")

    def test_detached_head(self) -> None:
        git = MockCommandRunner()
        git.respond("symbolic-ref", returncode=1)
        assert isinstance(_repo(git).current_branch(), Err)


# =============================================================================
# Branches, commits, merges, tags
# =============================================================================


class TestBranchManipulation:
    def test_checkout(self) -> None:
        git = MockCommandRunner()
        console = MockConsole()
        assert _repo(git, console).checkout("develop") == Ok(None)
        assert git.commands == [["checkout", "develop"]]
        assert console.find("Checking out 'develop' branch.")

    def test_checkout_failure_carries_git_message(self) -> None:
        git = MockCommandRunner()
        git.respond("checkout", returncode=1, stderr="error: pathspec 'nope' did not match")
        result = _repo(git).checkout("nope")
        assert isinstance(result, Err)
        assert result.error.message == "error: pathspec 'nope' did not match"

    def test_create_and_checkout(self) -> None:
        git = MockCommandRunner()
        _repo(git).create_and_checkout("feature/x", "develop")
        assert git.commands == [["checkout", "-b", "feature/x", "develop"]]

    def test_create_branch(self) -> None:
        git = MockCommandRunner()
        _repo(git).create_branch("support/1.x", "1.0")
        assert git.commands == [["branch", "support/1.x", "1.0"]]

    def test_branch_delete(self) -> None:
        git = MockCommandRunner()
        repo = _repo(git)
        repo.branch_delete("feature/x")
        repo.branch_delete("feature/y", force=True)
        assert git.commands == [["branch", "-d", "feature/x"], ["branch", "-D", "feature/y"]]


class TestCommit:
    def test_prefix_and_properties(self) -> None:
        git = MockCommandRunner()
        repo = _repo(git, settings=FlowSettings(commit_message_prefix="[mgf] "))
        repo.commit("Update to @{version}", {"version": "1.1"})
        assert git.commands == [["commit", "-a", "-m", "[mgf] Update to 1.1"]]

    def test_signed(self) -> None:
        git = MockCommandRunner()
        _repo(git, settings=FlowSettings(gpg_sign_commit=True)).commit("msg")
        assert git.commands == [["commit", "-a", "-S", "-m", "msg"]]


class TestMerge:
    def test_rebase_wins(self) -> None:
        git = MockCommandRunner()
        _repo(git).merge("feature/x", rebase=True, ff_only=True, no_ff=True, message="m")
        assert git.commands == [["rebase", "feature/x"]]

    def test_ff_only_ignores_message(self) -> None:
        git = MockCommandRunner()
        _repo(git).merge("feature/x", ff_only=True, no_ff=True, message="m")
        assert git.commands == [["merge", "--ff-only", "feature/x"]]

    def test_no_ff_with_message(self) -> None:
        git = MockCommandRunner()
        _repo(git).merge_no_ff("release/1.0", "Merge @{version}", {"version": "1.0"})
        assert git.commands == [["merge", "--no-ff", "release/1.0", "-m", "Merge 1.0"]]

    def test_plain_signed(self) -> None:
        git = MockCommandRunner()
        _repo(git, settings=FlowSettings(gpg_sign_commit=True)).merge("develop")
        assert git.commands == [["merge", "-S", "develop"]]

    def test_message_is_prefixed_then_substituted(self) -> None:
        git = MockCommandRunner()
        repo = _repo(git, settings=FlowSettings(commit_message_prefix="[mgf] "))
        repo.merge_no_ff("release/1.0", "Merge @{version}", {"version": "1.0"})
        repo.merge("develop", message="Merge @{version}", properties={"version": "1.0"})
        assert git.commands == [
            ["merge", "--no-ff", "release/1.0", "-m", "[mgf] Merge 1.0"],
            ["merge", "develop", "-m", "[mgf] Merge 1.0"],
        ]

    def test_rebase_and_ff_only_take_no_message(self) -> None:
        git = MockCommandRunner()
        repo = _repo(git, settings=FlowSettings(commit_message_prefix="[mgf] "))
        repo.merge("feature/x", rebase=True, message="Merge @{version}", properties={"version": "1"})
        repo.merge("feature/x", ff_only=True, message="Merge @{version}", properties={"version": "1"})
        assert git.commands == [
            ["rebase", "feature/x"],
            ["merge", "--ff-only", "feature/x"],
        ]
        assert all("-m" not in command for command in git.commands)

    def test_squash(self) -> None:
        git = MockCommandRunner()
        _repo(git).merge_squash("feature/x")
        assert git.commands == [["merge", "--squash", "feature/x"]]


class TestTag:
    def test_annotated(self) -> None:
        git = MockCommandRunner()
        _repo(git).tag("1.0", "Tag release @{version}", properties={"version": "1.0"})
        assert git.commands == [["tag", "-a", "1.0", "-m", "Tag release 1.0"]]

    def test_signed(self) -> None:
        git = MockCommandRunner()
        _repo(git).tag("1.0", "Tag release", signed=True)
        assert git.commands == [["tag", "-a", "-s", "1.0", "-m", "Tag release"]]


# =============================================================================
# Remote
# =============================================================================


class TestRemote:
    def test_fetch_failure_is_warning(self) -> None:
        git = MockCommandRunner()
        git.respond("fetch", returncode=1)
        console = MockConsole()
        assert _repo(git, console).fetch_remote("develop") is False
        assert console.has_warning()
        assert "fetchRemote" in console.text

    def test_fetch_and_compare_in_sync(self) -> None:
        git = MockCommandRunner()
        git.respond("rev-list", stdout="2\t0\n")
        assert _repo(git).fetch_and_compare("develop") == Ok(None)
        assert git.commands == [
            ["fetch", "--quiet", "origin", "develop"],
            ["rev-list", "--left-right", "--count", "develop...origin/develop"],
        ]

    def test_fetch_and_compare_remote_ahead(self) -> None:
        git = MockCommandRunner()
        git.respond("rev-list", stdout="0\t3\n")
        result = _repo(git).fetch_and_compare("develop")
        assert isinstance(result, Err)
        assert result.error.kind == "diverged_branch"
        assert result.error.message == (
            "Remote branch 'origin/develop' is ahead of the local branch 'develop'. "
            "Execute git pull."
        )

    def test_fetch_and_compare_skips_when_fetch_fails(self) -> None:
        git = MockCommandRunner()
        git.respond("fetch", returncode=128)
        assert _repo(git).fetch_and_compare("develop") == Ok(None)
        assert len(git.commands) == 1

    def test_fetch_remote_and_create(self) -> None:
        git = MockCommandRunner()
        git.respond("show-ref", returncode=1)
        _repo(git, gitflow=GitFlowConfig(origin="upstream")).fetch_remote_and_create("develop")
        assert git.commands[1:] == [
            ["fetch", "--quiet", "upstream", "develop"],
            ["checkout", "-b", "develop", "upstream/develop"],
        ]

    def test_fetch_remote_and_create_existing(self) -> None:
        git = MockCommandRunner()
        assert _repo(git).fetch_remote_and_create("develop") == Ok(None)
        assert len(git.commands) == 1

    def test_push(self) -> None:
        git = MockCommandRunner()
        repo = _repo(git)
        repo.push("master", follow_tags=True)
        repo.push("develop")
        assert git.commands == [
            ["push", "--quiet", "-u", "--follow-tags", "origin", "master"],
            ["push", "--quiet", "-u", "origin", "develop"],
        ]

    def test_push_delete_failure_is_warning(self) -> None:
        git = MockCommandRunner()
        git.respond("push", "--delete", returncode=1)
        console = MockConsole()
        _repo(git, console).push_delete("feature/x")
        assert console.has_warning()
        assert "fetchRemote" not in console.text


class TestGitFlowConfig:
    def test_production_differs_from_development(self) -> None:
        git = MockCommandRunner()
        assert _repo(git).production_differs_from_development()
        single = GitFlowConfig(production_branch="main", development_branch="main")
        assert not _repo(git, gitflow=single).production_differs_from_development()
        assert git.commands == []

    def test_init_writes_all_keys(self) -> None:
        git = MockCommandRunner()
        _repo(git).init_gitflow_config()
        assert git.commands == [
            ["config", "gitflow.branch.master", "master"],
            ["config", "gitflow.branch.develop", "develop"],
            ["config", "gitflow.prefix.feature", "feature/"],
            ["config", "gitflow.prefix.release", "release/"],
            ["config", "gitflow.prefix.hotfix", "hotfix/"],
            ["config", "gitflow.prefix.support", "support/"],
            ["config", "gitflow.prefix.versiontag", ""],
            ["config", "gitflow.origin", "origin"],
        ]

    def test_set_config_ignores_failure(self) -> None:
        git = MockCommandRunner()
        git.respond("config", returncode=1)
        _repo(git).set_config("gitflow.origin", "origin")

    def test_set_config_none_is_empty_argument(self) -> None:
        git = MockCommandRunner()
        _repo(git).set_config("gitflow.prefix.versiontag", None)
        assert git.commands == [["config", "gitflow.prefix.versiontag", ""]]


# =============================================================================
# Real git
# =============================================================================


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestRealRepository:
    @pytest.fixture
    def repo(self, tmp_path: Path) -> Repository:
        _git(tmp_path, "init", "-q")
        _git(tmp_path, "config", "user.email", "dev@example.com")
        _git(tmp_path, "config", "user.name", "Dev")
        _git(tmp_path, "config", "commit.gpgsign", "false")
        _git(tmp_path, "config", "tag.gpgsign", "false")
        (tmp_path / "pom.xml").write_text("<project/>", encoding="utf-8")
        _git(tmp_path, "add", "pom.xml")
        _git(tmp_path, "commit", "-q", "-m", "init")
        runner = CommandRunner(
            Executable("git", override="git", default=lambda: "git"),
            cwd=tmp_path,
            console=MockConsole(),
        )
        return Repository(runner, gitflow=GitFlowConfig(), settings=FlowSettings(), console=MockConsole())

    def test_last_tag_is_newest_then_highest_version(self, repo: Repository) -> None:
        for tag in ("v1.10", "v1.9", "v2.0"):
            assert repo.tag(tag, f"Tag {tag}") == Ok(None)
        assert repo.find_last_tag() == Ok("v2.0")

    def test_branch_roundtrip(self, repo: Repository) -> None:
        assert repo.create_and_checkout("feature/x", "HEAD") == Ok(None)
        assert repo.current_branch() == Ok("feature/x")
        assert repo.branch_exists("feature/x")
        assert repo.find_branches("feature/") == Ok("feature/x")

    def test_uncommitted(self, repo: Repository, tmp_path: Path) -> None:
        assert repo.has_uncommitted_changes() == Ok(False)
        (tmp_path / "pom.xml").write_text("<project></project>", encoding="utf-8")
        assert repo.has_uncommitted_changes() == Ok(True)

    def test_init_gitflow_config_stores_empty_tag_prefix(
        self, repo: Repository, tmp_path: Path
    ) -> None:
        repo.init_gitflow_config()
        result = subprocess.run(
            ["git", "config", "--get", "gitflow.prefix.versiontag"],
            cwd=tmp_path,
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert result.stdout == "\n"
