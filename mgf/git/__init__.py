"""Git operations module.

Usage:
    from mgf.git import Repository

    repo = Repository(runner, gitflow=config.gitflow, settings=config.settings,
                      console=console)
    if repo.branch_exists("develop"):
        repo.checkout("develop")
"""

from mgf.git.repository import LOCAL_REFS, TAG_REFS, Repository

__all__ = [
    "LOCAL_REFS",
    "Repository",
    "TAG_REFS",
]
