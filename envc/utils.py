import os
import pathlib
import tempfile
import typing

import git

from .errors import FileOperationError


def find_git_repo(directory: pathlib.Path) -> typing.Optional[git.Repo]:
    try:
        return git.Repo(directory, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return None


def atomic_write(path: pathlib.Path, text: str) -> None:
    """
    Write text to a temporary file beside path and move it into place.

    The target is either left untouched or completely replaced.
    """
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as file:
            file.write(text)
        os.replace(tmp, path)
    except BaseException:
        pathlib.Path(tmp).unlink(missing_ok=True)
        raise


def read_text(path: pathlib.Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as error:
        raise FileOperationError(path, 'read', str(error)) from error
