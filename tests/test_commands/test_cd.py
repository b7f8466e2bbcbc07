"""Tests for the cd builtin."""

import os

import pytest
from pipesh import Shell

PATH = os.environ.get("PATH", "/usr/local/bin:/usr/bin:/bin")


def make_shell(tmp_path, **env):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "inner.txt").write_text("inside\n")
    (tmp_path / "file.txt").write_text("x")
    return Shell(env={"PATH": PATH, **env}, inherit_environ=False, cwd=str(tmp_path))


class TestCd:
    """Test changing directory."""

    @pytest.mark.asyncio
    async def test_relative(self, tmp_path):
        shell = make_shell(tmp_path)
        result = await shell.exec("cd sub")
        assert result.exit_code == 0
        assert result.stdout == ""
        assert shell.cwd == str(tmp_path / "sub")
        assert shell.env["PWD"] == str(tmp_path / "sub")
        assert shell.env["OLDPWD"] == str(tmp_path)

    @pytest.mark.asyncio
    async def test_parent_is_normalized(self, tmp_path):
        shell = make_shell(tmp_path)
        await shell.exec("cd sub")
        await shell.exec("cd ..")
        assert shell.cwd == str(tmp_path)

    @pytest.mark.asyncio
    async def test_absolute(self, tmp_path):
        shell = make_shell(tmp_path)
        await shell.exec(f"cd {tmp_path / 'sub'}")
        assert shell.cwd == str(tmp_path / "sub")

    @pytest.mark.asyncio
    async def test_dash_returns_and_prints(self, tmp_path):
        shell = make_shell(tmp_path)
        await shell.exec("cd sub")
        result = await shell.exec("cd -")
        assert result.stdout == f"{tmp_path}\n"
        assert shell.cwd == str(tmp_path)

    @pytest.mark.asyncio
    async def test_dash_without_previous(self, tmp_path):
        shell = make_shell(tmp_path)
        result = await shell.exec("cd -")
        assert result.exit_code == 1
        assert "OLDPWD not set" in result.stderr

    @pytest.mark.asyncio
    async def test_home(self, tmp_path):
        shell = make_shell(tmp_path, HOME=str(tmp_path / "sub"))
        await shell.exec("cd")
        assert shell.cwd == str(tmp_path / "sub")

    @pytest.mark.asyncio
    async def test_home_not_set(self, tmp_path):
        shell = make_shell(tmp_path)
        result = await shell.exec("cd")
        assert result.exit_code == 1
        assert "HOME not set" in result.stderr

    @pytest.mark.asyncio
    async def test_external_commands_follow(self, tmp_path):
        shell = make_shell(tmp_path)
        await shell.exec("cd sub")
        result = await shell.exec("cat inner.txt")
        assert result.stdout == "inside\n"

    @pytest.mark.asyncio
    async def test_host_cwd_unchanged(self, tmp_path):
        before = os.getcwd()
        shell = make_shell(tmp_path)
        await shell.exec("cd sub")
        assert os.getcwd() == before


class TestCdErrors:
    """Test cd failures."""

    @pytest.mark.asyncio
    async def test_missing(self, tmp_path):
        shell = make_shell(tmp_path)
        result = await shell.exec("cd nope")
        assert result.exit_code == 1
        assert result.stderr == "pipesh: cd: nope: No such file or directory\n"
        assert shell.cwd == str(tmp_path)

    @pytest.mark.asyncio
    async def test_not_a_directory(self, tmp_path):
        shell = make_shell(tmp_path)
        result = await shell.exec("cd file.txt")
        assert result.exit_code == 1
        assert "Not a directory" in result.stderr

    @pytest.mark.asyncio
    async def test_too_many_arguments(self, tmp_path):
        shell = make_shell(tmp_path)
        result = await shell.exec("cd sub sub")
        assert result.exit_code == 1
        assert "too many arguments" in result.stderr

    @pytest.mark.asyncio
    async def test_prefix_assignment_does_not_persist(self, tmp_path):
        shell = make_shell(tmp_path)
        await shell.exec("A=1 cd sub")
        assert "A" not in shell.env
        assert shell.cwd == str(tmp_path / "sub")
