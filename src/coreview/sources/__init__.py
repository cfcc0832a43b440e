"""Where the diff under review comes from."""

from .git_diff import commit_subjects, diff_args, read_git_diff
from .github import PullRequest, fetch_pr_patch, parse_patch, parse_pr_url, read_pr_diff
from .types import DiffSource

__all__ = [
    "DiffSource",
    "PullRequest",
    "commit_subjects",
    "diff_args",
    "fetch_pr_patch",
    "parse_patch",
    "parse_pr_url",
    "read_git_diff",
    "read_pr_diff",
]
