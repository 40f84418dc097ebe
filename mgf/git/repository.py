"""Git operations used by the branching workflow.

``Repository`` is a catalog of named git invocations. Steps that must
succeed return ``Result[..., FlowError]``; existence and syntax checks return
plain booleans because a non-zero exit is an expected answer there.

Remote fetches and remote branch deletion are best-effort: their failures
are reported as warnings and the workflow continues.

Usage:
    repo = Repository(runner, gitflow=config.gitflow, settings=config.settings,
                      console=console)
    match repo.has_uncommitted_changes():
        case Ok(True):
            console.error("commit or stash first")
        case Ok(False):
            ...
        case Err(e):
            console.error(e.message)
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from mgf.core.config import FlowSettings, GitFlowConfig
from mgf.core.errors import FlowError
from mgf.core.messages import apply_prefix, replace_properties
from mgf.core.result import Err, Ok, Result
from mgf.output.console import ConsoleProtocol
from mgf.platform.process import CommandResult, CommandRunner

__all__ = ["Repository", "LOCAL_REFS", "TAG_REFS"]

LOCAL_REFS = "refs/heads/"
TAG_REFS = "refs/tags/"

# `git diff --quiet` / `git diff-index --quiet` exit with 1 when differences exist.
_DIFFERENCES_FOUND = 1

_SHORT_REFNAME_FORMAT = "--format=%(refname:short)"


def _remove_quotes(value: str) -> str:
    # Some platforms hand back for-each-ref output wrapped in quotes.
    return value.replace('"', "")


class Repository:
    """Git operations for one working tree.

    Attributes:
        gitflow: Branch names, prefixes and remote.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        gitflow: GitFlowConfig,
        settings: FlowSettings,
        console: ConsoleProtocol,
    ) -> None:
        self._git = runner
        self.gitflow = gitflow
        self._settings = settings
        self._console = console

    @property
    def origin(self) -> str:
        return self.gitflow.origin

    def production_differs_from_development(self) -> bool:
        """False when one branch serves as both production and development."""
        return not self.gitflow.same_production_and_development

    # -------------------------------------------------------------------------
    # Working tree state
    # -------------------------------------------------------------------------

    def has_uncommitted_changes(self) -> Result[bool, FlowError]:
        """Check the working tree, then the index, for changes.

        Returns:
            Ok(True) if either diff reports differences, Ok(False) if both
            are clean, Err(FlowError) if a diff failed for another reason
            and printed a diagnostic (e.g. a corrupt repository).
        """
        diff = self._git.run_probe(
            ["diff", "--no-ext-diff", "--ignore-submodules", "--quiet", "--exit-code"]
        )

        failed: CommandResult | None = None
        if diff.ok:
            index = self._git.run_probe(
                ["diff-index", "--cached", "--quiet", "--ignore-submodules", "HEAD", "--"]
            )
            if not index.ok:
                failed = index
        else:
            failed = diff

        if failed is None:
            return Ok(False)

        if failed.returncode != _DIFFERENCES_FOUND and failed.stderr.strip():
            return Err(FlowError(kind="command_failed", message=failed.stderr.strip()))

        return Ok(True)

    def check_uncommitted_changes(self) -> Result[None, FlowError]:
        """Fail when the working tree or the index has changes."""
        self._console.info("Checking for uncommitted changes.")
        result = self.has_uncommitted_changes()
        if isinstance(result, Err):
            return result
        if result.value:
            return Err(
                FlowError(
                    kind="uncommitted_changes",
                    message="You have some uncommitted files.",
                    hint="Commit or discard local changes in order to proceed.",
                )
            )
        return Ok(None)

    def is_valid_branch_name(self, name: str) -> bool:
        """Ask git whether ``name`` is an acceptable branch name."""
        return self._git.run_probe(["check-ref-format", "--allow-onelevel", name]).ok

    # -------------------------------------------------------------------------
    # Branch and tag lookup
    # -------------------------------------------------------------------------

    def find_branches(
        self, name: str, *, first_match: bool = False, refs: str = LOCAL_REFS
    ) -> Result[str, FlowError]:
        """List branches under ``refs`` whose name starts with ``name``.

        A trailing ``/`` in ``name`` matches recursively (``**``), otherwise
        a single path segment (``*``).

        Returns:
            Ok(names) one per line, unquoted and stripped.
        """
        wildcard = "**" if name.endswith("/") else "*"
        args = ["for-each-ref"]
        if first_match:
            args.append("--count=1")
        args += [_SHORT_REFNAME_FORMAT, refs + name + wildcard]

        result = self._git.run_checked(args)
        if isinstance(result, Err):
            return result
        return Ok(_remove_quotes(result.value.stdout).strip())

    def fetch_and_find_remote_branches(
        self, remote: str, name: str, *, first_match: bool = False
    ) -> Result[str, FlowError]:
        """Fetch (best-effort), then search ``refs/remotes/<remote>/``."""
        self.fetch_remote()
        return self.find_branches(name, first_match=first_match, refs=f"refs/remotes/{remote}/")

    def find_tags(self) -> Result[str, FlowError]:
        """All tags, oldest author date first."""
        result = self._git.run_checked(
            ["for-each-ref", "--sort=*authordate", _SHORT_REFNAME_FORMAT, TAG_REFS]
        )
        if isinstance(result, Err):
            return result
        return Ok(_remove_quotes(result.value.stdout))

    def find_last_tag(self) -> Result[str, FlowError]:
        """Most recent tag by tagger date; version ordering breaks ties."""
        result = self._git.run_checked(
            [
                "for-each-ref",
                "--sort=-version:refname",
                "--sort=-taggerdate",
                "--count=1",
                _SHORT_REFNAME_FORMAT,
                TAG_REFS,
            ]
        )
        if isinstance(result, Err):
            return result
        return Ok(re.sub(r"\r?\n", "", _remove_quotes(result.value.stdout)))

    def current_branch(self) -> Result[str, FlowError]:
        result = self._git.run_checked(["symbolic-ref", "-q", "--short", "HEAD"])
        if isinstance(result, Err):
            return result
        return Ok(result.value.stdout.strip())

    def branch_exists(self, name: str) -> bool:
        return self._git.run_probe(["show-ref", "--verify", "--quiet", LOCAL_REFS + name]).ok

    def tag_exists(self, name: str) -> bool:
        return self._git.run_probe(["show-ref", "--verify", "--quiet", TAG_REFS + name]).ok

    # -------------------------------------------------------------------------
    # Branch manipulation
    # -------------------------------------------------------------------------

    def checkout(self, name: str) -> Result[None, FlowError]:
        self._console.info(f"Checking out '{name}' branch.")
        return self._checked(["checkout", name])

    def create_and_checkout(self, new_branch: str, from_branch: str) -> Result[None, FlowError]:
        self._console.info(
            f"Creating a new branch '{new_branch}' from '{from_branch}' and checking it out."
        )
        return self._checked(["checkout", "-b", new_branch, from_branch])

    def create_branch(self, new_branch: str, from_branch: str) -> Result[None, FlowError]:
        self._console.info(f"Creating a new branch '{new_branch}' from '{from_branch}'.")
        return self._checked(["branch", new_branch, from_branch])

    def branch_delete(self, name: str, *, force: bool = False) -> Result[None, FlowError]:
        if force:
            self._console.info(f"Deleting (-D) '{name}' branch.")
            return self._checked(["branch", "-D", name])
        self._console.info(f"Deleting '{name}' branch.")
        return self._checked(["branch", "-d", name])

    # -------------------------------------------------------------------------
    # Commits, merges and tags
    # -------------------------------------------------------------------------

    def commit(
        self, message: str, properties: Mapping[str, str] | None = None
    ) -> Result[None, FlowError]:
        """``git commit -a [-S] -m``, with prefix and ``@{key}`` substitution."""
        message = replace_properties(
            apply_prefix(message, self._settings.commit_message_prefix), properties
        )
        if self._settings.gpg_sign_commit:
            self._console.info("Committing changes. GPG-signed.")
            return self._checked(["commit", "-a", "-S", "-m", message])
        self._console.info("Committing changes.")
        return self._checked(["commit", "-a", "-m", message])

    def merge(
        self,
        branch: str,
        *,
        rebase: bool = False,
        no_ff: bool = False,
        ff_only: bool = False,
        message: str | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> Result[None, FlowError]:
        """Integrate ``branch`` using exactly one strategy.

        Priority: rebase, then fast-forward only, then no fast-forward, then
        plain merge. Only the last two create a merge commit and take the
        message.
        """
        sign = "-S" if self._settings.gpg_sign_commit else ""
        msg_args: list[str] = []
        if message and message.strip():
            msg = replace_properties(
                apply_prefix(message, self._settings.commit_message_prefix), properties
            )
            msg_args = ["-m", msg]

        if rebase:
            self._console.info(f"Rebasing '{branch}' branch.")
            return self._checked(["rebase", sign, branch])
        if ff_only:
            self._console.info(f"Merging (--ff-only) '{branch}' branch.")
            return self._checked(["merge", "--ff-only", sign, branch])
        if no_ff:
            self._console.info(f"Merging (--no-ff) '{branch}' branch.")
            return self._checked(["merge", "--no-ff", sign, branch, *msg_args])
        self._console.info(f"Merging '{branch}' branch.")
        return self._checked(["merge", sign, branch, *msg_args])

    def merge_no_ff(
        self, branch: str, message: str | None, properties: Mapping[str, str] | None = None
    ) -> Result[None, FlowError]:
        return self.merge(branch, no_ff=True, message=message, properties=properties)

    def merge_squash(self, branch: str) -> Result[None, FlowError]:
        self._console.info(f"Squashing '{branch}' branch.")
        return self._checked(["merge", "--squash", branch])

    def tag(
        self,
        name: str,
        message: str,
        *,
        signed: bool = False,
        properties: Mapping[str, str] | None = None,
    ) -> Result[None, FlowError]:
        """Create an annotated (optionally GPG-signed) tag."""
        message = replace_properties(message, properties)
        if signed:
            self._console.info(f"Creating GPG-signed '{name}' tag.")
            return self._checked(["tag", "-a", "-s", name, "-m", message])
        self._console.info(f"Creating '{name}' tag.")
        return self._checked(["tag", "-a", name, "-m", message])

    # -------------------------------------------------------------------------
    # Remote
    # -------------------------------------------------------------------------

    def fetch_remote(self, branch: str = "") -> bool:
        """Fetch from the configured remote; failure is only a warning.

        Returns:
            True if the fetch succeeded.
        """
        self._console.info(f"Fetching remote branch '{self.origin} {branch}'.")
        result = self._git.run_probe(["fetch", "--quiet", self.origin, branch])
        if not result.ok:
            self._console.warning(
                f"There were some problems fetching remote branch '{self.origin} {branch}'. "
                "You can turn off remote branch fetching by setting the 'fetchRemote' "
                "parameter to false."
            )
        return result.ok

    def fetch_remote_and_create(self, branch: str) -> Result[None, FlowError]:
        """Check out ``branch`` from the remote when it doesn't exist locally."""
        if self.branch_exists(branch):
            return Ok(None)
        self._console.info(
            f"Local branch '{branch}' doesn't exist. "
            f"Trying to fetch and check it out from '{self.origin}'."
        )
        self.fetch_remote(branch)
        return self.create_and_checkout(branch, f"{self.origin}/{branch}")

    def fetch_and_compare(self, branch: str) -> Result[None, FlowError]:
        """Fetch ``branch`` and fail if the remote has commits the local lacks."""
        if not self.fetch_remote(branch):
            return Ok(None)

        remote_branch = f"{self.origin}/{branch}"
        self._console.info(f"Comparing local branch '{branch}' with remote '{remote_branch}'.")
        result = self._git.run_checked(
            ["rev-list", "--left-right", "--count", f"{branch}...{remote_branch}"]
        )
        if isinstance(result, Err):
            return result

        # "<local-ahead>\t<remote-ahead>"
        counts = result.value.stdout.split("\t")
        if len(counts) > 1 and "".join(counts[1].split()) != "0":
            return Err(
                FlowError(
                    kind="diverged_branch",
                    message=(
                        f"Remote branch '{remote_branch}' is ahead of the local branch "
                        f"'{branch}'. Execute git pull."
                    ),
                    hint=f"git pull {self.origin} {branch}",
                )
            )
        return Ok(None)

    def push(self, branch: str, *, follow_tags: bool = False) -> Result[None, FlowError]:
        self._console.info(f"Pushing '{branch}' branch to '{self.origin}'.")
        if follow_tags:
            return self._checked(["push", "--quiet", "-u", "--follow-tags", self.origin, branch])
        return self._checked(["push", "--quiet", "-u", self.origin, branch])

    def push_delete(self, branch: str) -> None:
        """Delete ``branch`` on the remote; failure is only a warning."""
        self._console.info(f"Deleting remote branch '{branch}' from '{self.origin}'.")
        result = self._git.run_probe(["push", "--delete", self.origin, branch])
        if not result.ok:
            self._console.warning(
                f"There were some problems deleting remote branch '{branch}' "
                f"from '{self.origin}'."
            )

    # -------------------------------------------------------------------------
    # git config
    # -------------------------------------------------------------------------

    def init_gitflow_config(self) -> None:
        """Record the branch model in the repository's ``gitflow.*`` config."""
        flow = self.gitflow
        for name, value in (
            ("gitflow.branch.master", flow.production_branch),
            ("gitflow.branch.develop", flow.development_branch),
            ("gitflow.prefix.feature", flow.feature_prefix),
            ("gitflow.prefix.release", flow.release_prefix),
            ("gitflow.prefix.hotfix", flow.hotfix_prefix),
            ("gitflow.prefix.support", flow.support_prefix),
            ("gitflow.prefix.versiontag", flow.version_tag_prefix),
            ("gitflow.origin", flow.origin),
        ):
            self.set_config(name, value)

    def set_config(self, name: str, value: str | None) -> None:
        """``git config <name> <value>``; exit codes are ignored.

        ``None`` is written as an empty value.
        """
        self._git.run_probe(["config", name, value or ""], keep_empty=True)

    def _checked(self, args: list[str]) -> Result[None, FlowError]:
        result = self._git.run_checked(args)
        if isinstance(result, Err):
            return result
        return Ok(None)
