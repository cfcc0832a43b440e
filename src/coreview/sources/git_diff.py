"""Read the diff to review from a local git repository."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import git  # GitPython

from coreview.errors import DiffSourceError

from .types import DiffSource

logger = logging.getLogger(__name__)


def _open_repo(repo_path: Union[str, Path]) -> git.Repo:
    try:
        return git.Repo(repo_path, search_parent_directories=True)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
        raise DiffSourceError(f"Not a git repository: {repo_path}") from e


def diff_args(target: Optional[str]) -> List[str]:
    """``git diff <target>``, or ``git diff HEAD`` (staged + unstaged) without one."""
    return [target] if target else ["HEAD"]


def commit_subjects(repo: git.Repo, target: Optional[str]) -> List[str]:
    """Subjects of the commits covered by *target*, oldest first.

    Only used as narration context, so a failure here is logged and ignored.
    """
    if not target:
        return []
    rev_range = target if ".." in target else f"{target}..HEAD"
    try:
        out: str = repo.git.log("--reverse", "--format=%s", rev_range)
    except git.GitCommandError as e:
        logger.warning(f"Could not read commit messages for {rev_range}: {e}")
        return []
    return [line.strip() for line in out.splitlines() if line.strip()]


def read_git_diff(repo_path: Union[str, Path] = ".", target: Optional[str] = None) -> DiffSource:
    """Return the diff for *target* (branch, commit or range) in *repo_path*.

    Raises:
        DiffSourceError: If the path is not a repository or git rejects the target
    """
    repo = _open_repo(repo_path)
    args = diff_args(target)
    logger.info(f"Running: git diff {' '.join(args)}")
    try:
        # strip_newline_in_stdout=False keeps the patch byte-exact
        diff_text: str = repo.git.diff(*args, strip_newline_in_stdout=False)
    except git.GitCommandError as e:
        raise DiffSourceError(f"Failed to get diff: git diff {' '.join(args)}") from e

    return DiffSource(diff=diff_text, commit_messages=commit_subjects(repo, target))
