"""Tests for the ls builtin."""

import os

import pytest
from pipesh import Shell

PATH = os.environ.get("PATH", "/usr/local/bin:/usr/bin:/bin")


def make_tree(tmp_path):
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / ".hidden").write_text("h")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "inner.txt").write_text("i")
    return Shell(env={"PATH": PATH}, inherit_environ=False, cwd=str(tmp_path))


class TestLs:
    """Test directory listings."""

    @pytest.mark.asyncio
    async def test_current_directory(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls")
        assert result.stdout == "a.txt\nb.txt\nsub\n"
        assert result.exit_code == 0

    @pytest.mark.asyncio
    async def test_all(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls -a")
        assert result.stdout == ".\n..\n.hidden\na.txt\nb.txt\nsub\n"

    @pytest.mark.asyncio
    async def test_combined_flags(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls -1a")
        assert result.stdout.startswith(".\n..\n")

    @pytest.mark.asyncio
    async def test_directory_argument(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls sub")
        assert result.stdout == "inner.txt\n"

    @pytest.mark.asyncio
    async def test_file_argument(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls a.txt")
        assert result.stdout == "a.txt\n"

    @pytest.mark.asyncio
    async def test_several_arguments(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls sub a.txt")
        assert result.stdout == "a.txt\n\nsub:\ninner.txt\n"

    @pytest.mark.asyncio
    async def test_several_directories(self, tmp_path):
        shell = make_tree(tmp_path)
        (tmp_path / "empty").mkdir()
        result = await shell.exec("ls sub empty")
        assert result.stdout == "sub:\ninner.txt\n\nempty:\n"

    @pytest.mark.asyncio
    async def test_missing_path(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls nope a.txt")
        assert result.exit_code == 2
        assert result.stderr == "ls: cannot access 'nope': No such file or directory\n"
        assert result.stdout == "a.txt\n"

    @pytest.mark.asyncio
    async def test_invalid_option(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls -z")
        assert result.exit_code == 2

    @pytest.mark.asyncio
    async def test_follows_cd(self, tmp_path):
        shell = make_tree(tmp_path)
        await shell.exec("cd sub")
        result = await shell.exec("ls")
        assert result.stdout == "inner.txt\n"

    @pytest.mark.asyncio
    async def test_piped(self, tmp_path):
        shell = make_tree(tmp_path)
        result = await shell.exec("ls | grep txt")
        assert result.stdout == "a.txt\nb.txt\n"
