"""Unit tests for shared utilities (outerspace.utils).

Tests cover:
- run_command: success, failure, cwd, timeout, env
- JSON helpers and manifest merging
- File-system helpers
- Rich output helpers
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from outerspace.utils import (
    ensure_dir,
    load_json,
    merge_dependencies,
    print_banner,
    print_error,
    print_success,
    print_summary_table,
    read_file,
    run_command,
    save_json,
    write_file,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command(self):
        returncode, stdout, stderr = await run_command([sys.executable, "-c", "print('hello')"])
        assert returncode == 0
        assert stdout == "hello"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_command(self):
        returncode, _, _ = await run_command([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert returncode == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_cwd(self, tmp_path: Path):
        returncode, stdout, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert returncode == 0
        assert Path(stdout).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_timeout(self):
        returncode, _, stderr = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_env(self):
        returncode, stdout, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.environ['OUTERSPACE_TEST'])"],
            env={"OUTERSPACE_TEST": "value"},
        )
        assert returncode == 0
        assert stdout == "value"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_returns_stderr(self):
        _, _, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('error_msg\\n')"]
        )
        assert stderr == "error_msg"


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


class TestJson:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "deep" / "data.json"
        await save_json({"a": 1}, path)
        assert path.read_text(encoding="utf-8") == '{\n  "a": 1\n}\n'
        assert load_json(path) == {"a": 1}

    @pytest.mark.unit
    def test_load_json_rejects_non_object(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_json(path)

    @pytest.mark.unit
    def test_load_json_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "nope.json")


class TestMergeDependencies:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_adds_and_overrides(self, tmp_path: Path):
        manifest = tmp_path / "package.json"
        manifest.write_text(
            json.dumps({
                "name": "frontend",
                "scripts": {"dev": "next dev"},
                "dependencies": {"next": "15.0.0", "next-themes": "^0.1.0"},
            }),
            encoding="utf-8",
        )

        result = await merge_dependencies(manifest, {"next-themes": "^0.4.4", "clsx": "^2.0.0"})

        assert result["dependencies"] == {
            "next": "15.0.0",
            "next-themes": "^0.4.4",
            "clsx": "^2.0.0",
        }
        on_disk = json.loads(manifest.read_text(encoding="utf-8"))
        assert on_disk == result
        assert on_disk["scripts"] == {"dev": "next dev"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_creates_missing_section(self, tmp_path: Path):
        manifest = tmp_path / "package.json"
        manifest.write_text('{"name": "backend"}', encoding="utf-8")

        result = await merge_dependencies(manifest, {"pg": "^8.11.0"})

        assert result == {"name": "backend", "dependencies": {"pg": "^8.11.0"}}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_manifest_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            await merge_dependencies(tmp_path / "package.json", {"pg": "^8.11.0"})


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


class TestFileHelpers:
    @pytest.mark.unit
    def test_ensure_dir_nested(self, tmp_path: Path):
        target = ensure_dir(tmp_path / "a" / "b")
        assert target.is_dir()
        # idempotent
        assert ensure_dir(target) == target

    @pytest.mark.unit
    def test_write_file_creates_parents(self, tmp_path: Path):
        path = tmp_path / "x" / "y" / "z.txt"
        write_file(path, "content")
        assert read_file(path) == "content"


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


class TestOutput:
    @pytest.mark.unit
    def test_print_error_goes_to_stderr(self, capsys):
        print_error("something broke")
        captured = capsys.readouterr()
        assert "something broke" in captured.err
        assert captured.out == ""

    @pytest.mark.unit
    def test_markup_in_messages_is_escaped(self, capsys):
        print_success("Writing app/[locale]/page.tsx")
        assert "app/[locale]/page.tsx" in capsys.readouterr().out

    @pytest.mark.unit
    def test_banner(self, capsys):
        print_banner("OUTERSPACE", "Fullstack Starter Kit")
        out = capsys.readouterr().out
        assert "OUTERSPACE" in out
        assert "Fullstack Starter Kit" in out

    @pytest.mark.unit
    def test_summary_table(self, capsys):
        print_summary_table([("theme", "patch-layout", "skipped")], title="Summary")
        out = capsys.readouterr().out
        assert "patch-layout" in out
        assert "skipped" in out
