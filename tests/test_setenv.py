import pathlib
import subprocess

import pytest

import envc.setenv
from envc.errors import SetEnvError
from envc.setenv import append_export, parse_env, preview, set_permanent, shell_config_path, unquote


def test_parse_env():
    content = '\n'.join([
        "# comment",
        "A=1",
        "",
        'B="two"',
        "C='three'",
        'D="unbalanced',
        "E=  spaced  ",
        "=no key",
        'F="',
        'G="a" "b"',
        "not a variable",
        "URL=a=b",
    ])
    assert parse_env(content) == [
        ('A', '1'),
        ('B', 'two'),
        ('C', 'three'),
        ('D', '"unbalanced'),
        ('E', 'spaced'),
        ('F', '"'),
        ('G', 'a" "b'),
        ('URL', 'a=b'),
    ]


@pytest.mark.parametrize('value,expected', [
    ('"x"', 'x'),
    ("'x'", 'x'),
    ('""', ''),
    ('"x\'', '"x\''),
    ('""x""', '"x"'),
    ('x', 'x'),
])
def test_unquote(value, expected):
    assert unquote(value) == expected


@pytest.mark.parametrize('shell,name', [
    ('/bin/zsh', '.zshrc'),
    ('/usr/local/bin/zsh', '.zshrc'),
    ('/bin/bash', '.bashrc'),
    ('', '.bashrc'),
])
def test_shell_config_path(shell, name):
    assert shell_config_path(pathlib.Path('/home/user'), shell) == pathlib.Path('/home/user') / name


def test_append_export(tmp_path):
    config = tmp_path / '.bashrc'
    config.write_text("alias ll='ls -l'\n")
    append_export(config, 'A', '1')
    append_export(config, 'B', 'two words')
    assert config.read_text() == "alias ll='ls -l'\nexport A=\"1\"\nexport B=\"two words\"\n"


def test_set_permanent_appends_to_shell_config(tmp_path, monkeypatch):
    monkeypatch.setattr(envc.setenv, 'is_windows', lambda: False)
    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.setenv('SHELL', '/bin/zsh')
    set_permanent('A', '1')
    assert (tmp_path / '.zshrc').read_text() == 'export A="1"\n'


def test_set_permanent_without_home(monkeypatch):
    monkeypatch.setattr(envc.setenv, 'is_windows', lambda: False)
    monkeypatch.delenv('HOME', raising=False)
    with pytest.raises(SetEnvError, match="HOME"):
        set_permanent('A', '1')


def test_set_permanent_with_setx(monkeypatch):
    calls = []

    def run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, stdout='SUCCESS', stderr='')

    monkeypatch.setattr(envc.setenv, 'is_windows', lambda: True)
    monkeypatch.setattr(subprocess, 'run', run)
    set_permanent('A', '1')
    assert calls == [('setx', 'A', '1')]


def test_setx_failure(monkeypatch):
    def run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, output='', stderr='ERROR: Access denied\n')

    monkeypatch.setattr(envc.setenv, 'is_windows', lambda: True)
    monkeypatch.setattr(subprocess, 'run', run)
    with pytest.raises(SetEnvError, match="Failed to set A: ERROR: Access denied"):
        set_permanent('A', '1')


@pytest.mark.parametrize('value,expected', [
    ('short', 'short'),
    ('x' * 20, 'x' * 20),
    ('x' * 21, 'x' * 20 + '...'),
])
def test_preview(value, expected):
    assert preview(value) == expected
