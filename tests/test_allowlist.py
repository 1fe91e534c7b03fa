import os

import pytest

from botguard.config import env_name
from botguard.paths.allowlist import (
    get_allowed_paths,
    is_device_path,
    is_path_allowed,
    is_within,
    normalize_path,
    set_allowed_paths,
)


@pytest.fixture
def projects(tmp_path, allow):
    root = tmp_path / "srv" / "projects"
    (root / "app").mkdir(parents=True)
    allow(root)
    return root


def test_child_of_allowed_root_is_allowed(projects):
    assert is_path_allowed(str(projects / "app"))
    assert is_path_allowed(str(projects))


def test_outside_path_is_denied(projects):
    assert not is_path_allowed("/etc/passwd")
    assert not is_path_allowed(str(projects.parent))


def test_empty_allowlist_denies_everything(tmp_path):
    assert get_allowed_paths() == []
    assert not is_path_allowed(str(tmp_path))
    assert not is_path_allowed("/")


def test_parent_segments_cannot_escape(projects):
    (projects.parent / "secrets").mkdir()
    assert not is_path_allowed(str(projects / ".." / "secrets"))
    assert not is_path_allowed(str(projects / "app" / ".." / ".." / "secrets"))
    assert is_path_allowed(str(projects / "app" / ".." / "app"))


def test_sibling_with_common_prefix_is_denied(projects):
    sibling = projects.parent / "projects-other"
    sibling.mkdir()
    assert not is_path_allowed(str(sibling))


def test_path_that_does_not_exist_yet(projects):
    assert is_path_allowed(str(projects / "new" / "deeper"))
    assert not is_path_allowed(str(projects.parent / "new"))


def test_symlink_out_of_the_root_is_denied(projects, tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    link = projects / "escape"
    try:
        os.symlink(outside, link, target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not available")

    assert not is_path_allowed(str(link))
    assert not is_path_allowed(str(link / "not-created-yet"))


def test_symlinked_root_is_resolved_too(tmp_path, allow):
    real = tmp_path / "real"
    (real / "app").mkdir(parents=True)
    alias = tmp_path / "alias"
    try:
        os.symlink(real, alias, target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not available")

    allow(alias)
    assert is_path_allowed(str(real / "app"))


@pytest.mark.parametrize("path", ["", "   ", "\t", None, 42, b"/srv"])
def test_malformed_input_is_denied(projects, path):
    assert is_path_allowed(path) is False


def test_nul_byte_is_denied(projects):
    assert not is_path_allowed(str(projects / "app") + "\0/etc/passwd")


def test_very_long_path_does_not_raise(projects):
    long_path = str(projects) + "/a" * 5000
    assert is_path_allowed(long_path) is True


def test_allowlist_is_read_on_every_call(projects, tmp_path, monkeypatch):
    other = tmp_path / "other"
    other.mkdir()
    assert not is_path_allowed(str(other))
    monkeypatch.setenv(env_name("paths"), f"{projects}, {other}")
    assert is_path_allowed(str(other))


def test_get_allowed_paths_trims_and_absolutizes(monkeypatch):
    monkeypatch.setenv(env_name("paths"), " /srv/a ,, relative ,")
    assert get_allowed_paths() == ["/srv/a", os.path.abspath("relative")]


def test_set_allowed_paths_replaces_the_list(projects, tmp_path):
    other = tmp_path / "other"
    other.mkdir()
    set_allowed_paths([str(other), "  ", ""])

    assert get_allowed_paths() == [str(other)]
    assert os.environ[env_name("paths")] == str(other)
    assert is_path_allowed(str(other))
    assert not is_path_allowed(str(projects / "app"))


def test_set_allowed_paths_rejects_a_plain_string():
    with pytest.raises(TypeError):
        set_allowed_paths("/srv/a,/srv/b")


def test_normalize_path_windows():
    assert normalize_path("\\\\?\\C:\\Projects\\App", windows=True) == "c:\\projects\\app"
    assert normalize_path("\\\\?\\UNC\\host\\Share", windows=True) == "\\\\host\\share"
    assert normalize_path("/Srv/App", windows=False) == "/Srv/App"


def test_is_within_posix():
    assert is_within("/allowed", "/allowed", windows=False)
    assert is_within("/allowed", "/allowed/sub/file", windows=False)
    assert not is_within("/allowed", "/allowed-other", windows=False)
    assert not is_within("/allowed", "/", windows=False)
    assert not is_within("/Allowed", "/allowed/sub", windows=False)


def test_is_within_windows_folds_case_and_checks_drives():
    assert is_within("C:\\Allowed", "c:\\allowed\\Sub", windows=True)
    assert is_within("C:\\Allowed", "\\\\?\\C:\\ALLOWED\\sub", windows=True)
    assert not is_within("C:\\Allowed", "C:\\Allowed-other", windows=True)
    assert not is_within("C:\\Allowed", "D:\\Allowed\\sub", windows=True)
    assert not is_within("C:\\Allowed", "C:\\", windows=True)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("\\\\.\\PhysicalDrive0", True),
        ("//./pipe/name", True),
        ("C:\\projects\\NUL", True),
        ("C:\\projects\\com1.txt", True),
        ("C:\\projects\\console", False),
        ("C:\\projects\\app", False),
    ],
)
def test_is_device_path(path, expected):
    assert is_device_path(path) is expected


def test_set_allowed_paths_rejects_commas(projects, tmp_path):
    before = get_allowed_paths()
    with pytest.raises(ValueError):
        set_allowed_paths([str(tmp_path / "a,b")])

    assert get_allowed_paths() == before
    assert not is_path_allowed(str(tmp_path / "a"))
