"""Tests for cargo detection, builds and scaffolding (infra/cargo_toolchain.py).

cargo is never executed: ``subprocess.run`` and ``shutil.which`` are
patched throughout.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from t3rn_contract.core.models import (
    ComposableSchedule,
    CrateMetadata,
    DeployTarget,
    UnstableFlags,
    Verbosity,
)
from t3rn_contract.exceptions import (
    BuildError,
    MetadataReadError,
    NothingToDeployError,
    ProjectExistsError,
    ToolchainNotFoundError,
)
from t3rn_contract.infra.cargo_toolchain import (
    CargoToolchain,
    detect_cargo,
    require_cargo,
)

_MOD = "t3rn_contract.infra.cargo_toolchain"
CARGO = Path("/usr/local/bin/cargo")


def _meta(root: Path, schedule: ComposableSchedule | None = None) -> CrateMetadata:
    return CrateMetadata(
        package_name="flipper",
        manifest_path=root / "Cargo.toml",
        composable_schedule=schedule,
    )


def _fake_cargo(root: Path, *crates: str) -> MagicMock:
    """A ``subprocess.run`` stand-in that drops release artifacts for *crates*."""

    def _run(command, cwd, check):
        release = root / "target" / "wasm32-unknown-unknown" / "release"
        release.mkdir(parents=True, exist_ok=True)
        for crate in crates:
            (release / f"{crate}.wasm").write_bytes(f"wasm:{crate}".encode())
        return subprocess.CompletedProcess(command, 0)

    return MagicMock(side_effect=_run)


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

class TestDetectCargo:
    def test_found_on_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CARGO", raising=False)
        binary = tmp_path / "cargo"
        binary.touch()
        with patch(f"{_MOD}.shutil.which", return_value=str(binary)):
            status = detect_cargo()
        assert status.found is True
        assert status.path == binary.resolve()
        assert status.install_commands == ()

    def test_cargo_variable_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        binary = tmp_path / "my-cargo"
        binary.touch()
        monkeypatch.setenv("CARGO", str(binary))
        with patch(f"{_MOD}.shutil.which") as which:
            status = detect_cargo()
        assert status.path == binary.resolve()
        which.assert_not_called()

    def test_not_found(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CARGO", raising=False)
        with patch(f"{_MOD}.shutil.which", return_value=None):
            status = detect_cargo()
        assert status.found is False
        assert status.path is None
        assert any("rustup" in cmd for cmd in status.install_commands)

    def test_require_cargo_raises_with_hint(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CARGO", raising=False)
        with patch(f"{_MOD}.shutil.which", return_value=None):
            with pytest.raises(ToolchainNotFoundError) as exc_info:
                require_cargo()
        assert "wasm32-unknown-unknown" in (exc_info.value.hint or "")


# ---------------------------------------------------------------------------
# new
# ---------------------------------------------------------------------------

class TestNewProject:
    def test_writes_project_files(self, tmp_path: Path) -> None:
        project = CargoToolchain().new_project("my_token", tmp_path)
        assert project == tmp_path / "my_token"
        for relative in (
            "Cargo.toml",
            "lib.rs",
            ".gitignore",
            ".ink/abi_gen/Cargo.toml",
            ".ink/abi_gen/main.rs",
        ):
            assert (project / relative).is_file()
        assert 'name = "my_token"' in (project / "Cargo.toml").read_text()
        assert "struct MyToken" in (project / "lib.rs").read_text()
        assert "contract::MyToken" in (project / ".ink/abi_gen/main.rs").read_text()

    def test_existing_directory_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "flipper").mkdir()
        with pytest.raises(ProjectExistsError):
            CargoToolchain().new_project("flipper", tmp_path)

    @pytest.mark.parametrize("name", ["1abc", "my-token", "", "a b"])
    def test_invalid_names(self, tmp_path: Path, name: str) -> None:
        with pytest.raises(BuildError):
            CargoToolchain().new_project(name, tmp_path)
        assert list(tmp_path.iterdir()) == []

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert CargoToolchain().new_project("flipper") == tmp_path / "flipper"


# ---------------------------------------------------------------------------
# build
# ---------------------------------------------------------------------------

class TestBuild:
    def test_copies_release_artifact(self, tmp_path: Path) -> None:
        run = _fake_cargo(tmp_path, "flipper")
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            path = CargoToolchain().build(_meta(tmp_path), None, UnstableFlags())
        assert path == tmp_path / "target" / "flipper-pruned.wasm"
        assert path.read_bytes() == b"wasm:flipper"

    def test_command_line_with_overrides(self, tmp_path: Path) -> None:
        run = _fake_cargo(tmp_path, "flipper")
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            CargoToolchain().build(_meta(tmp_path), Verbosity.VERBOSE, UnstableFlags())
        command = run.call_args.args[0]
        assert command[:6] == [
            str(CARGO), "build", "--release", "--target",
            "wasm32-unknown-unknown", "--no-default-features",
        ]
        assert "--verbose" in command
        assert "profile.release.lto=true" in command
        assert run.call_args.kwargs["cwd"] == tmp_path

    def test_original_manifest_skips_overrides(self, tmp_path: Path) -> None:
        run = _fake_cargo(tmp_path, "flipper")
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            CargoToolchain().build(
                _meta(tmp_path), Verbosity.QUIET, UnstableFlags(original_manifest=True),
            )
        command = run.call_args.args[0]
        assert "--config" not in command
        assert "--quiet" in command

    def test_nonzero_exit_is_build_error(self, tmp_path: Path) -> None:
        run = MagicMock(return_value=subprocess.CompletedProcess([], 101))
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            with pytest.raises(BuildError, match="exit code 101"):
                CargoToolchain().build(_meta(tmp_path), None, UnstableFlags())

    def test_missing_artifact_is_build_error(self, tmp_path: Path) -> None:
        run = _fake_cargo(tmp_path)
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            with pytest.raises(BuildError, match="artifact not found"):
                CargoToolchain().build(_meta(tmp_path), None, UnstableFlags())

    def test_missing_cargo_stops_before_running(self, tmp_path: Path) -> None:
        run = MagicMock()
        with patch(
            f"{_MOD}.require_cargo",
            side_effect=ToolchainNotFoundError("cargo is not installed or not on PATH."),
        ), patch(f"{_MOD}.subprocess.run", run):
            with pytest.raises(ToolchainNotFoundError):
                CargoToolchain().build(_meta(tmp_path), None, UnstableFlags())
        run.assert_not_called()


# ---------------------------------------------------------------------------
# composable-build
# ---------------------------------------------------------------------------

class TestComposableBuild:
    def test_builds_each_component_once(self, tmp_path: Path) -> None:
        schedule = ComposableSchedule(
            (
                DeployTarget("flipper", "ws://a:1"),
                DeployTarget("erc20", "ws://b:1"),
                DeployTarget("flipper", "ws://c:1"),
            ),
        )
        run = _fake_cargo(tmp_path, "flipper", "erc20")
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            directory = CargoToolchain().composable_build(
                _meta(tmp_path, schedule), None, UnstableFlags(),
            )
        assert directory == tmp_path / "target" / "composables"
        assert (directory / "flipper-pruned.wasm").read_bytes() == b"wasm:flipper"
        assert (directory / "erc20-pruned.wasm").read_bytes() == b"wasm:erc20"
        command = run.call_args.args[0]
        assert command.count("--package") == 2

    def test_requires_schedule(self, tmp_path: Path) -> None:
        with pytest.raises(MetadataReadError):
            CargoToolchain().composable_build(_meta(tmp_path), None, UnstableFlags())

    def test_empty_schedule(self, tmp_path: Path) -> None:
        with pytest.raises(NothingToDeployError):
            CargoToolchain().composable_build(
                _meta(tmp_path, ComposableSchedule(())), None, UnstableFlags(),
            )


# ---------------------------------------------------------------------------
# generate-metadata
# ---------------------------------------------------------------------------

class TestGenerateMetadata:
    def test_runs_abi_gen(self, tmp_path: Path) -> None:
        def _run(command, cwd, check):
            (tmp_path / "target").mkdir()
            (tmp_path / "target" / "metadata.json").write_text("{}")
            return subprocess.CompletedProcess(command, 0)

        run = MagicMock(side_effect=_run)
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            path = CargoToolchain().generate_metadata(_meta(tmp_path), None, UnstableFlags())
        assert path == tmp_path / "target" / "metadata.json"
        assert run.call_args.args[0][1:5] == ["run", "--package", "abi-gen", "--release"]

    def test_missing_output_is_build_error(self, tmp_path: Path) -> None:
        run = MagicMock(return_value=subprocess.CompletedProcess([], 0))
        with patch(f"{_MOD}.require_cargo", return_value=CARGO), \
                patch(f"{_MOD}.subprocess.run", run):
            with pytest.raises(BuildError, match="metadata.json"):
                CargoToolchain().generate_metadata(_meta(tmp_path), None, UnstableFlags())
