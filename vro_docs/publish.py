"""
Publish generated documentation to a dedicated git branch.

The branch is named after the pull request head with a suffix, e.g.
``feature/avi-lb-documentation``. Nothing is committed when the docs did not
change.
"""

import logging
import subprocess
from pathlib import Path

from vro_docs.exceptions import GitCommandError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_SUFFIX = "-documentation"
DEFAULT_COMMIT_MESSAGE = "docs: auto-generated workflow documentation"
DEFAULT_USER_NAME = "github-actions[bot]"
DEFAULT_USER_EMAIL = "github-actions[bot]@users.noreply.github.com"


def run_git(args: list[str], repo: Path, check: bool = True) -> subprocess.CompletedProcess:
    """
    Run a git command in ``repo``.

    Raises:
        GitCommandError: If ``check`` is set and git exits non-zero
    """
    cmd = ["git", *args]
    logger.debug(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=str(repo), capture_output=True, text=True, check=False)
    if check and result.returncode != 0:
        raise GitCommandError(cmd, result.returncode, result.stderr)
    return result


def documentation_branch(head_ref: str, suffix: str = DEFAULT_BRANCH_SUFFIX) -> str:
    return f"{head_ref}{suffix}"


def has_staged_changes(repo: Path) -> bool:
    # git diff --cached --quiet exits 1 when the index differs from HEAD
    result = run_git(["diff", "--cached", "--quiet"], repo, check=False)
    if result.returncode not in (0, 1):
        raise GitCommandError(["git", "diff", "--cached", "--quiet"], result.returncode, result.stderr)
    return result.returncode == 1


def publish_docs(
    repo: Path,
    head_ref: str,
    docs_dir: str | Path,
    push: bool = True,
    branch_suffix: str = DEFAULT_BRANCH_SUFFIX,
    commit_message: str = DEFAULT_COMMIT_MESSAGE,
    user_name: str = DEFAULT_USER_NAME,
    user_email: str = DEFAULT_USER_EMAIL,
) -> bool:
    """
    Commit the docs directory on a new documentation branch and push it.

    Args:
        repo: Repository working tree
        head_ref: Source branch of the pull request
        docs_dir: Directory with the generated docs, relative to ``repo``
        push: Push the branch with upstream tracking
        branch_suffix: Appended to ``head_ref`` to name the branch
        commit_message: Commit message
        user_name: Committer name configured in the repository
        user_email: Committer email configured in the repository

    Returns:
        True if a commit was made, False when there were no doc changes

    Raises:
        GitCommandError: If any git command fails
    """
    branch = documentation_branch(head_ref, branch_suffix)

    run_git(["config", "user.name", user_name], repo)
    run_git(["config", "user.email", user_email], repo)
    run_git(["checkout", "-b", branch], repo)
    run_git(["add", str(docs_dir)], repo)

    if not has_staged_changes(repo):
        logger.info("No docs changes to commit, skipping push")
        return False

    run_git(["commit", "-m", commit_message], repo)
    logger.info(f"Committed documentation on {branch}")

    if push:
        run_git(["push", "--set-upstream", "origin", branch], repo)
        logger.info(f"Pushed {branch}")

    return True
