"""
Keep plaintext .env files out of git.
"""

import logging
import os.path
import pathlib
import typing

import git

from .utils import find_git_repo

log = logging.getLogger(__name__)

GITIGNORE = '.gitignore'
HEADER = '# Plain .env files (secrets - do not commit)'


def ignored_names(directory: pathlib.Path) -> typing.Set[str]:
    """Names listed on their own line in a directory's .gitignore."""
    path = directory / GITIGNORE
    if not path.exists():
        return set()
    return {line.strip() for line in path.read_text(encoding='utf-8').splitlines()}


def git_ignored(repo: git.Repo, paths: typing.Sequence[str]) -> typing.Set[str]:
    """Ask git which of some repository relative paths are ignored."""
    if not paths:
        return set()
    try:
        output = repo.git.check_ignore('-z', '--', *paths)
    except git.exc.GitCommandError as error:
        # check-ignore exits with 1 when no path is ignored
        if error.status == 1:
            return set()
        raise
    return {path for path in output.split('\0') if path}


def not_ignored(
        directory: pathlib.Path,
        paths: typing.Iterable[pathlib.Path]) -> typing.Sequence[pathlib.Path]:
    """
    Return the paths that git would not ignore.

    Paths inside a git working tree are checked by git itself. Any other path
    counts as ignored if its name is a line in the directory's .gitignore.
    """
    paths = list(paths)
    names = ignored_names(directory)
    repo = find_git_repo(directory)

    relative: typing.Dict[pathlib.Path, str] = {}
    if repo is not None and repo.working_tree_dir is not None:
        root = pathlib.Path(repo.working_tree_dir).resolve()
        for path in paths:
            try:
                rel = pathlib.PurePath(os.path.relpath(path.resolve(), root))
            except ValueError:
                continue
            if rel.parts[:1] != (os.path.pardir,):
                relative[path] = rel.as_posix()

    log.info(f"Checking {len(relative)} files with git and {len(paths) - len(relative)} "
             f"against {directory / GITIGNORE}")
    excluded = git_ignored(repo, list(relative.values())) if relative else set()

    def is_ignored(path: pathlib.Path) -> bool:
        if path in relative:
            return relative[path] in excluded
        return path.name in names

    return tuple(path for path in paths if not is_ignored(path))


def add_to_gitignore(directory: pathlib.Path, names: typing.Sequence[str]) -> pathlib.Path:
    """Append names to a directory's .gitignore under a header comment."""
    path = directory / GITIGNORE
    existing = path.read_text(encoding='utf-8') if path.exists() else ''

    lines = []
    if existing and not existing.endswith('\n'):
        lines.append('')
    lines += ['', HEADER, *names]

    log.debug(f"Adding {len(names)} names to {path}")
    with path.open('a', encoding='utf-8') as file:
        file.write('\n'.join(lines) + '\n')
    return path
