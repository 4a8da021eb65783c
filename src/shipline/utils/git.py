import logging
from pathlib import Path

import git

from ..exceptions import ResolutionError

logger = logging.getLogger(__name__)


def head_commit(context: Path | str) -> str:
    """
    Returns the full hex SHA of HEAD for the repository containing `context`.

    Used when no commit identifier is supplied by the trigger. A dirty
    working tree is reported but not rejected.
    """
    try:
        repo = git.Repo(str(context), search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise ResolutionError(
            f"No commit identifier given and '{context}' is not inside a git repository: {e}"
        )

    try:
        sha = repo.head.commit.hexsha
    except ValueError as e:
        # Raised by GitPython for a repository without any commit yet
        raise ResolutionError(f"Repository at '{repo.working_dir}' has no commits: {e}")

    if repo.is_dirty(untracked_files=False):
        logger.warning(f"Working tree at '{repo.working_dir}' has uncommitted changes; tagging with HEAD {sha[:7]}.")
    logger.debug(f"Resolved commit '{sha}' from '{repo.working_dir}'.")
    return sha
