import functools
import logging
import os.path
import pathlib
import typing

import click
from click.core import ParameterSource

from . import __doc__, __version__
from .cipher import Cipher, Password
from .engine import ProcessMode
from .envfiles import Batch, EnvFile
from .errors import EnvcException, NoCandidateFiles, OperationCancelled, SetEnvError
from .gitignore import add_to_gitignore, not_ignored
from .scanner import count_variables, derive_output_name, find_env_files, scan_directory
from .setenv import describe_target, is_windows, parse_env, preview, set_permanent
from .utils import read_text

log = logging.getLogger(__name__)

PASSWORD_ENV_VAR = 'ENVC_PASSWORD'


@functools.lru_cache()
def rel(path: pathlib.Path) -> str:
    """
    Convert a path to a relative Path.

    Returns a string as these should only be used for presentation.
    """
    return os.path.relpath(path.as_posix(), pathlib.Path.cwd().as_posix())


def src(path: pathlib.Path) -> str:
    """Style a path to an input file."""
    return click.style(rel(path), fg='cyan')


def dst(path: pathlib.Path) -> str:
    """Style a path to an output file."""
    return click.style(rel(path), fg='yellow')


class PathType(click.Path):
    def convert(self, value, param, ctx):
        return pathlib.Path(super().convert(value, param, ctx))


def confirm(prompt: str, default: bool) -> None:
    if not click.confirm(prompt, default=default):
        raise OperationCancelled()


def file_options(func):
    """Options shared by the encrypt and decrypt commands."""
    options = [
        click.argument(
            'file',
            type=PathType(dir_okay=False),
            required=False),
        click.option(
            '-i', '--input', 'input_path',
            type=PathType(dir_okay=False),
            help="Input file path, takes priority over FILE."),
        click.option(
            '-o', '--output', 'output_path',
            type=PathType(dir_okay=False),
            help="Output file path."),
        click.option(
            '-p', '--password',
            metavar='PASSWORD',
            envvar=PASSWORD_ENV_VAR,
            type=click.STRING,
            help=f"Defaults to ${PASSWORD_ENV_VAR}, otherwise prompts."),
        click.option(
            '-y', '--yes',
            default=False,
            is_flag=True,
            help="Overwrite existing output files without asking."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(help=__doc__)
@click.option(
    '-C', '--directory',
    type=PathType(
        file_okay=False,
        dir_okay=True,
        exists=True),
    default=pathlib.Path.cwd,
    help="Directory to search for .env files, defaults to the current directory.")
@click.option(
    '-d', '--debug', 'debug',
    default=False,
    is_flag=True,
    help="Enable debug logging.")
@click.pass_context
def main(ctx, directory: pathlib.Path, debug: bool):
    logging.basicConfig(level=(logging.DEBUG if debug else logging.WARNING))
    ctx.obj = directory


@main.command()
def version():
    """Show the application version."""
    click.echo(f"envc {__version__}")


@main.command()
@click.option(
    '--encrypted', 'encrypted',
    default=False,
    is_flag=True,
    help="List encrypted files instead of plaintext files.")
@click.pass_obj
def ls(directory: pathlib.Path, encrypted: bool):
    """List .env files with their variable count and output path."""
    mode = ProcessMode.DECRYPT if encrypted else ProcessMode.ENCRYPT
    for record in scan_directory(directory, mode):
        click.echo(f"{src(record.path)} ({record.variables} vars) -> "
                   f"{dst(derive_output_name(record.path, mode))}")


@main.command()
@file_options
@click.pass_obj
def encrypt(directory: pathlib.Path, **kwargs):
    """
    Encrypt the values of a plaintext .env file.

    With a file and a password (or an output path) the file is encrypted
    directly. Otherwise the files to encrypt are picked interactively.
    """
    run(directory, ProcessMode.ENCRYPT, **kwargs)


@main.command()
@file_options
@click.pass_obj
def decrypt(directory: pathlib.Path, **kwargs):
    """
    Decrypt the values of an encrypted .env file.

    With a file and a password (or an output path) the file is decrypted
    directly. Otherwise the files to decrypt are picked interactively.
    """
    run(directory, ProcessMode.DECRYPT, **kwargs)


def run(
        directory: pathlib.Path,
        mode: ProcessMode,
        file: typing.Optional[pathlib.Path],
        input_path: typing.Optional[pathlib.Path],
        output_path: typing.Optional[pathlib.Path],
        password: typing.Optional[str],
        yes: bool) -> None:
    source = input_path or file
    log.debug(f"Running {mode} with source={source} output={output_path}")

    if source is not None and (output_path is not None or password):
        one_liner(mode, source, output_path, password, yes)
    else:
        interactive(directory, mode, source, password)


def one_liner(
        mode: ProcessMode,
        source: pathlib.Path,
        target: typing.Optional[pathlib.Path],
        password: typing.Optional[str],
        yes: bool) -> None:
    if not source.exists():
        raise EnvcException(f"File not found: {source}")

    env_file = EnvFile.for_source(source, mode, target)
    if mode is ProcessMode.DECRYPT:
        env_file.validate()

    if env_file.target.exists() and not yes:
        click.secho(f"File {rel(env_file.target)} already exists!", fg='yellow')
        confirm("Overwrite this file?", default=False)

    cipher = Cipher(Password(password) if password else prompt_password(mode))

    click.echo(f"{'Encrypting' if mode is ProcessMode.ENCRYPT else 'Decrypting'}...")
    result = env_file.process(cipher)
    for key in result.keys:
        click.echo(f"  {click.style('✓', fg='green')} {key}")

    click.secho(f"Done! Saved: {rel(env_file.target)}", fg='green')


def interactive(
        directory: pathlib.Path,
        mode: ProcessMode,
        source: typing.Optional[pathlib.Path],
        password: typing.Optional[str]) -> None:
    if source is not None:
        if not source.exists():
            raise EnvcException(f"File not found: {source}")
        batch = Batch([EnvFile.for_source(source, mode)], directory)
    else:
        batch = select_files(directory, mode)

    if mode is ProcessMode.DECRYPT:
        batch.validate()

    click.echo(f"Selected {len(batch)} file(s):")
    for env_file in batch:
        click.echo(f"  • {src(env_file.source)} ({count_variables(env_file.source)} vars)")

    click.echo("Output files:")
    for env_file in batch:
        click.echo(f"  • {dst(env_file.target)}")
    confirm("Proceed with these output files?", default=True)

    existing = batch.existing_targets()
    if existing:
        click.secho("The following files already exist:", fg='yellow')
        for path in existing:
            click.echo(f"  • {click.style(rel(path), fg='red')}")
        confirm("Overwrite these files?", default=False)

    ctx = click.get_current_context()
    if password and ctx.get_parameter_source('password') is ParameterSource.ENVIRONMENT:
        click.echo(f"Using password from {PASSWORD_ENV_VAR}")

    cipher = Cipher(Password(password) if password else prompt_password(mode))

    action = 'Encrypt' if mode is ProcessMode.ENCRYPT else 'Decrypt'
    click.echo(f"{action}ing {len(batch)} file(s)...")
    for env_file, result in batch.process(cipher):
        click.echo(f"  {click.style('✓', fg='green')} {src(env_file.source)} -> "
                   f"{dst(env_file.target)} ({len(result.keys)} vars)")
    click.secho(f"Done! {action}ed {len(batch)} file(s)", fg='green')

    if mode is ProcessMode.ENCRYPT:
        offer_gitignore(directory, [env_file.source for env_file in batch])
        click.echo("Tip: To skip the password prompt next time:")
        click.echo(f'   export {PASSWORD_ENV_VAR}="your_password"')


def parse_selection(text: str, count: int) -> typing.List[int]:
    """Parse a comma or space separated list of 1-based file numbers."""
    indexes: typing.List[int] = []
    for part in text.replace(',', ' ').split():
        if not part.isdigit() or not 1 <= int(part) <= count:
            raise click.BadParameter(f"'{part}' is not a number between 1 and {count}")
        if int(part) - 1 not in indexes:
            indexes.append(int(part) - 1)
    if not indexes:
        raise click.BadParameter("No files selected")
    return indexes


def show_numbered(paths: typing.Sequence[pathlib.Path]) -> None:
    for number, path in enumerate(paths, start=1):
        click.echo(f"  {number}. {src(path)} ({count_variables(path)} vars)")


def select_files(directory: pathlib.Path, mode: ProcessMode) -> Batch:
    """Ask which of the candidate files in a directory to process."""
    batch = Batch.scan(directory, mode)

    click.echo(f"Found {len(batch)} .env file(s) in {rel(directory)}:")
    show_numbered([env_file.source for env_file in batch])

    choice = click.prompt(
        "Process all files, select individual files, or quit?",
        type=click.Choice(['all', 'select', 'quit']),
        default='all')

    if choice == 'quit':
        raise OperationCancelled()

    if choice == 'all':
        return batch

    indexes = click.prompt(
        "Select files (numbers separated by commas)",
        value_proc=lambda text: parse_selection(text, len(batch)))
    return Batch([batch.files[i] for i in indexes], directory)


def prompt_password(mode: ProcessMode) -> Password:
    if mode is ProcessMode.ENCRYPT:
        value = click.prompt(
            "Enter encryption password",
            hide_input=True,
            confirmation_prompt="Confirm password")
    else:
        value = click.prompt("Enter decryption password", hide_input=True)
    return Password(value)


def offer_gitignore(directory: pathlib.Path, sources: typing.Sequence[pathlib.Path]) -> None:
    missing = not_ignored(directory, sources)
    if not missing:
        return

    click.echo("The following source files are not in .gitignore:")
    for path in missing:
        click.echo(f"  • {click.style(path.name, fg='yellow')}")

    if click.confirm("Add them to .gitignore?", default=True):
        add_to_gitignore(directory, [path.name for path in missing])
        click.secho(f"Added {len(missing)} file(s) to .gitignore", fg='green')


@main.command()
@click.argument(
    'file',
    type=PathType(exists=True, dir_okay=False),
    required=False)
@click.option(
    '-y', '--yes',
    default=False,
    is_flag=True,
    help="Skip the confirmation prompt.")
@click.pass_obj
def setenv(directory: pathlib.Path, file: typing.Optional[pathlib.Path], yes: bool):
    """
    Set the variables in a plaintext .env file permanently.

    On Windows variables are set with 'setx'. Elsewhere export lines are
    appended to ~/.zshrc or ~/.bashrc.
    """
    path = file if file is not None else select_plain_file(directory)

    variables = parse_env(read_text(path))
    if not variables:
        raise EnvcException("No environment variables found in file")

    click.echo(f"Will set {len(variables)} environment variable(s):")
    for key, value in variables:
        click.echo(f"  • {click.style(key, fg='yellow')} = {click.style(preview(value), dim=True)}")

    if not yes:
        click.echo(f"Variables will be added to: {describe_target()}")
        confirm("Proceed?", default=True)

    failed: typing.List[str] = []
    for key, value in variables:
        try:
            set_permanent(key, value)
        except SetEnvError as error:
            click.echo(f"  {click.style('✗', fg='red')} {key} - {error.message}")
            failed.append(key)
        else:
            click.echo(f"  {click.style('✓', fg='green')} {key}")

    if failed:
        click.secho(f"Set {len(variables) - len(failed)} of {len(variables)} variable(s). "
                    f"{len(failed)} failed.", fg='yellow')
        return

    click.secho(f"Done! Set {len(variables)} variable(s) permanently", fg='green')
    if is_windows():
        click.echo("Note: Restart your terminal or log out/in for changes to take effect.")
    else:
        click.echo("Note: Run 'source ~/.bashrc' or 'source ~/.zshrc' to apply changes.")


def select_plain_file(directory: pathlib.Path) -> pathlib.Path:
    paths = find_env_files(directory, ProcessMode.ENCRYPT)
    if not paths:
        raise NoCandidateFiles(f"No .env files found in {rel(directory)}")

    click.echo(f"Found .env file(s) in {rel(directory)}:")
    show_numbered(paths)

    number = click.prompt(
        "Select file to export (0 to quit)",
        type=click.IntRange(0, len(paths)),
        default=1)
    if number == 0:
        raise OperationCancelled()
    return paths[number - 1]
