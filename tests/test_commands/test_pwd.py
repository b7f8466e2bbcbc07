"""Tests for pwd command options."""

import os

import pytest
from pipesh import Shell

PATH = os.environ.get("PATH", "/usr/local/bin:/usr/bin:/bin")


def make_link(tmp_path):
    real = tmp_path / "real_dir"
    real.mkdir()
    (tmp_path / "link_dir").symlink_to(real)
    return Shell(env={"PATH": PATH}, inherit_environ=False, cwd=str(tmp_path))


class TestPwdOptions:
    """Test pwd -P/-L options."""

    @pytest.mark.asyncio
    async def test_pwd_physical_flag(self, tmp_path):
        shell = make_link(tmp_path)
        await shell.exec("cd link_dir")
        result = await shell.exec("pwd -P")
        assert result.stdout.strip() == os.path.realpath(tmp_path / "real_dir")

    @pytest.mark.asyncio
    async def test_pwd_logical_flag(self, tmp_path):
        shell = make_link(tmp_path)
        await shell.exec("cd link_dir")
        result = await shell.exec("pwd -L")
        # Should show link_dir (logical path)
        assert result.stdout.strip() == str(tmp_path / "link_dir")

    @pytest.mark.asyncio
    async def test_pwd_default_is_logical(self, tmp_path):
        """Default pwd behavior should be logical (like -L)."""
        shell = make_link(tmp_path)
        await shell.exec("cd link_dir")
        result = await shell.exec("pwd")
        assert result.stdout.strip() == str(tmp_path / "link_dir")

    @pytest.mark.asyncio
    async def test_last_flag_wins(self, tmp_path):
        shell = make_link(tmp_path)
        await shell.exec("cd link_dir")
        result = await shell.exec("pwd -PL")
        assert result.stdout.strip() == str(tmp_path / "link_dir")


class TestPwdErrors:
    """Test pwd argument errors."""

    @pytest.mark.asyncio
    async def test_too_many_arguments(self, tmp_path):
        shell = make_link(tmp_path)
        result = await shell.exec("pwd extra")
        assert result.exit_code == 1
        assert result.stderr == "pwd: too many arguments\n"

    @pytest.mark.asyncio
    async def test_invalid_option(self, tmp_path):
        shell = make_link(tmp_path)
        result = await shell.exec("pwd -x")
        assert result.exit_code == 2
