import pathlib
import typing

import attr
import click.testing
import pytest

import envc.cli
from envc.cipher import Cipher, Password

PASSWORD = 'correct horse battery staple'

EXAMPLE = "# Database\nDB_HOST=localhost\nDB_PASS=secret\n"


@pytest.fixture()
def example() -> str:
    return EXAMPLE


@pytest.fixture()
def password() -> Password:
    return Password(PASSWORD)


@pytest.fixture()
def cipher(password) -> Cipher:
    return Cipher(password, iterations=1000)


@pytest.fixture()
def other_cipher() -> Cipher:
    return Cipher(Password('not the password'), iterations=1000)


@pytest.fixture()
def workdir(tmp_path, monkeypatch) -> pathlib.Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(envc.cli.PASSWORD_ENV_VAR, raising=False)
    return tmp_path


@pytest.fixture()
def invoke(workdir):
    def invoke_func(
            arguments: typing.Sequence[str],
            input: typing.Optional[str] = None,
            env: typing.Optional[typing.Mapping[str, str]] = None,
            check: bool = True) -> click.testing.Result:
        assert all(isinstance(arg, str) for arg in arguments)
        runner = click.testing.CliRunner()
        result = runner.invoke(envc.cli.main, list(arguments), input=input, env=env)
        if check and result.exit_code != 0:
            message = f"Command envc {' '.join(arguments)} failed:\n{result.output}"
            raise Exception(message) from result.exception
        return result

    return invoke_func


@attr.s(frozen=True)
class ExampleName:
    name: str = attr.ib()
    plain: bool = attr.ib()
    encrypted: bool = attr.ib()

    def __str__(self):
        return self.name


@pytest.fixture(params=[
    ExampleName('.env', plain=True, encrypted=False),
    ExampleName('.env.local', plain=True, encrypted=False),
    ExampleName('.env.production', plain=True, encrypted=False),
    ExampleName('.envrc', plain=True, encrypted=False),
    ExampleName('.env.enc', plain=False, encrypted=True),
    ExampleName('.env.local.enc', plain=False, encrypted=True),
    ExampleName('.env.encrypted', plain=False, encrypted=True),
    ExampleName('.environment.enc', plain=False, encrypted=True),
    ExampleName('prod.env.enc', plain=False, encrypted=True),
    ExampleName('prod.env', plain=False, encrypted=False),
    ExampleName('.ENV', plain=False, encrypted=False),
    ExampleName('.env.ENC', plain=True, encrypted=False),
    ExampleName('readme.md', plain=False, encrypted=False),
    ExampleName('secrets.enc', plain=False, encrypted=False),
], ids=str)
def example_name(request) -> ExampleName:
    return request.param
