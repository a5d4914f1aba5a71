import pathlib

import pytest

from envc.engine import ProcessMode
from envc.scanner import (
    Category, FileRecord, classify, count_variables, derive_output_name, find_env_files,
    is_encrypted_env_file, is_plain_env_file, scan_directory)


def test_is_plain_env_file(example_name):
    assert is_plain_env_file(example_name.name) is example_name.plain


def test_is_encrypted_env_file(example_name):
    assert is_encrypted_env_file(example_name.name) is example_name.encrypted


def test_classify(example_name):
    expected_encrypt = Category.PLAIN if example_name.plain else Category.NEITHER
    expected_decrypt = Category.ENCRYPTED if example_name.encrypted else Category.NEITHER
    assert classify(example_name.name, ProcessMode.ENCRYPT) is expected_encrypt
    assert classify(example_name.name, ProcessMode.DECRYPT) is expected_decrypt


def test_classification_is_exclusive(example_name):
    categories = {classify(example_name.name, mode) for mode in ProcessMode}
    assert len(categories - {Category.NEITHER}) <= 1


def test_output_name_pairs_with_input(example_name):
    if not example_name.plain:
        pytest.skip("only plaintext names are encrypted")
    encrypted = derive_output_name(example_name.name, ProcessMode.ENCRYPT)
    assert is_encrypted_env_file(encrypted.name)
    assert derive_output_name(encrypted, ProcessMode.DECRYPT) == pathlib.Path(example_name.name)


@pytest.mark.parametrize('path,mode,expected', [
    ('.env', ProcessMode.ENCRYPT, '.env.enc'),
    ('.env.local', ProcessMode.ENCRYPT, '.env.local.enc'),
    ('config/.env', ProcessMode.ENCRYPT, 'config/.env.enc'),
    ('.env.enc', ProcessMode.DECRYPT, '.env'),
    ('.env.local.enc', ProcessMode.DECRYPT, '.env.local'),
    ('.env.encrypted', ProcessMode.DECRYPT, '.env'),
    ('config/.env.production.encrypted', ProcessMode.DECRYPT, 'config/.env.production'),
    ('.env.encrypted.enc', ProcessMode.DECRYPT, '.env.encrypted'),
    ('.env.enc.enc', ProcessMode.DECRYPT, '.env.enc'),
    ('.env.local', ProcessMode.DECRYPT, '.env.local'),
], ids=str)
def test_derive_output_name(path, mode, expected):
    assert derive_output_name(path, mode) == pathlib.Path(expected)
    assert derive_output_name(pathlib.Path(path), mode) == pathlib.Path(expected)


@pytest.fixture()
def directory(tmp_path) -> pathlib.Path:
    (tmp_path / '.env.local').write_text("A=1\n")
    (tmp_path / '.env').write_text("# comment\nA=1\n\nB=2\nnot a variable\n  # C=3\n")
    (tmp_path / '.env.production.encrypted').write_text("A=YWJjZGVmZ2g=\n")
    (tmp_path / '.env.enc').write_text("A=YWJjZGVmZ2g=\nB=YWJjZGVmZ2g=\n")
    (tmp_path / 'readme.md').write_text("A=1\n")
    (tmp_path / '.env.d').mkdir()
    (tmp_path / 'nested').mkdir()
    (tmp_path / 'nested' / '.env.nested').write_text("A=1\n")
    return tmp_path


def test_find_env_files(directory):
    assert find_env_files(directory, ProcessMode.ENCRYPT) == (
        directory / '.env',
        directory / '.env.local',
    )


def test_scan_directory_encrypt(directory):
    assert scan_directory(directory, ProcessMode.ENCRYPT) == (
        FileRecord(directory / '.env', Category.PLAIN, 2),
        FileRecord(directory / '.env.local', Category.PLAIN, 1),
    )


def test_scan_directory_decrypt(directory):
    assert scan_directory(directory, ProcessMode.DECRYPT) == (
        FileRecord(directory / '.env.enc', Category.ENCRYPTED, 2),
        FileRecord(directory / '.env.production.encrypted', Category.ENCRYPTED, 1),
    )


def test_scan_missing_directory(tmp_path):
    assert scan_directory(tmp_path / 'missing', ProcessMode.ENCRYPT) == ()


def test_scan_empty_directory(tmp_path):
    assert scan_directory(tmp_path, ProcessMode.DECRYPT) == ()


def test_count_variables(directory):
    assert count_variables(directory / '.env') == 2


def test_count_variables_missing_file(tmp_path):
    assert count_variables(tmp_path / '.env') == 0


def test_count_variables_undecodable_file(tmp_path):
    path = tmp_path / '.env'
    path.write_bytes(b"A=\xff\xfe\n")
    assert count_variables(path) == 0
