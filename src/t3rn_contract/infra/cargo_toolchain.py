"""Infrastructure: cargo detection, builds and project scaffolding.

Implements :class:`~t3rn_contract.core.protocols.Toolchain` by
delegating to ``cargo``.  Wasm post-processing is not performed: the
release artifact is copied to the ``-pruned.wasm`` location the deploy
commands read from.

Rules
-----
* Detection via the ``CARGO`` variable or :func:`shutil.which`.
* No ``print()``; cargo output is inherited and callers report results.
* Every subprocess failure is mapped to :class:`BuildError`.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from t3rn_contract.core.models import CrateMetadata, UnstableFlags, Verbosity
from t3rn_contract.exceptions import (
    BuildError,
    MetadataReadError,
    NothingToDeployError,
    ProjectExistsError,
    ToolchainNotFoundError,
)

logger = logging.getLogger(__name__)

WASM_TARGET: str = "wasm32-unknown-unknown"

# Profile overrides applied unless ``-Z original-manifest`` is given.
OPTIMISATION_OVERRIDES: tuple[str, ...] = (
    "profile.release.panic='abort'",
    "profile.release.lto=true",
    "profile.release.opt-level='z'",
    "profile.release.overflow-checks=false",
)

_PROJECT_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CargoStatus:
    """Result of a cargo detection probe.

    Attributes
    ----------
    found : bool
        Whether cargo was located.
    path : Path | None
        Absolute path to the cargo binary, or ``None``.
    install_commands : tuple[str, ...]
        Suggested commands for installing the toolchain.  Empty when
        cargo is already present.
    """

    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


def detect_cargo() -> CargoStatus:
    """Probe ``$CARGO`` then ``PATH`` for a cargo binary."""
    override = os.environ.get("CARGO")
    result = override if override and Path(override).is_file() else shutil.which("cargo")

    if result is not None:
        return CargoStatus(found=True, path=Path(result).resolve(), install_commands=())

    return CargoStatus(
        found=False,
        path=None,
        install_commands=(
            "curl --proto '=https' --tlsv1.2 -sSf https://sh.rustup.rs | sh",
            f"rustup target add {WASM_TARGET}",
        ),
    )


def require_cargo() -> Path:
    """Locate cargo or raise :class:`ToolchainNotFoundError`."""
    status = detect_cargo()
    if not status.found or status.path is None:
        hint_lines = ["Install the Rust toolchain using:"]
        hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise ToolchainNotFoundError(
            "cargo is not installed or not on PATH.",
            hint="\n".join(hint_lines),
        )
    return status.path


# ---------------------------------------------------------------------------
# Toolchain
# ---------------------------------------------------------------------------

class CargoToolchain:
    """Concrete :class:`Toolchain` driving ``cargo`` as a subprocess."""

    def new_project(self, name: str, target_dir: Path | None = None) -> Path:
        """Write a minimal ink! contract project named *name*.

        Raises
        ------
        ProjectExistsError
            If the destination directory already exists.
        BuildError
            If *name* is not a valid crate identifier.
        """
        if not _PROJECT_NAME.match(name):
            raise BuildError(
                f"Contract names must begin with a letter and contain only "
                f"alphanumeric characters or underscores, got {name!r}",
            )
        project_dir = (target_dir if target_dir is not None else Path.cwd()) / name
        if project_dir.exists():
            raise ProjectExistsError(f"A directory named {project_dir} already exists")

        (project_dir / ".ink" / "abi_gen").mkdir(parents=True)
        files = {
            "Cargo.toml": _CARGO_TOML,
            "lib.rs": _LIB_RS,
            ".gitignore": _GITIGNORE,
            ".ink/abi_gen/Cargo.toml": _ABI_GEN_CARGO_TOML,
            ".ink/abi_gen/main.rs": _ABI_GEN_MAIN_RS,
        }
        for relative, template in files.items():
            (project_dir / relative).write_text(
                template.format(name=name, camel=_camel_case(name)),
                encoding="utf-8",
            )
        logger.info("Created project at %s", project_dir)
        return project_dir

    def build(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
    ) -> Path:
        """Compile the crate to Wasm and return the artifact path."""
        self._cargo_build(metadata, verbosity, unstable_flags)
        built = _release_artifact(metadata, metadata.package_name)
        destination = metadata.default_wasm_path
        _copy_artifact(built, destination)
        return destination

    def composable_build(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
    ) -> Path:
        """Compile every scheduled component and collect them in one directory."""
        schedule = metadata.composable_schedule
        if schedule is None:
            raise MetadataReadError(
                f"Failed to read composable metadata from {metadata.manifest_path}",
            )
        if not schedule.deploy:
            raise NothingToDeployError(
                "Nothing to build. Empty deploy key of composable metadata.",
            )
        components = list(dict.fromkeys(target.compose for target in schedule.deploy))
        package_args: list[str] = []
        for component in components:
            package_args += ["--package", component]
        self._cargo_build(metadata, verbosity, unstable_flags, extra=package_args)
        for component in components:
            _copy_artifact(
                _release_artifact(metadata, component),
                metadata.composable_wasm_path(component),
            )
        return metadata.composables_directory

    def generate_metadata(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
    ) -> Path:
        """Run the project's ``abi-gen`` package to emit ``metadata.json``."""
        args = ["run", "--package", "abi-gen", "--release"]
        args += _verbosity_args(verbosity)
        args += _override_args(unstable_flags)
        self._run(args, cwd=metadata.root)
        metadata_file = metadata.target_directory / "metadata.json"
        if not metadata_file.is_file():
            raise BuildError(f"abi-gen did not produce {metadata_file}")
        return metadata_file

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cargo_build(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
        *,
        extra: Sequence[str] = (),
    ) -> None:
        args = ["build", "--release", "--target", WASM_TARGET, "--no-default-features"]
        args += _verbosity_args(verbosity)
        args += _override_args(unstable_flags)
        args += extra
        self._run(args, cwd=metadata.root)

    @staticmethod
    def _run(args: Sequence[str], *, cwd: Path) -> None:
        cargo = require_cargo()
        command = [str(cargo), *args]
        logger.info("Running %s", " ".join(command))
        try:
            completed = subprocess.run(command, cwd=cwd, check=False)
        except OSError as exc:
            raise BuildError(f"Failed to execute cargo: {exc}") from exc
        if completed.returncode != 0:
            raise BuildError(
                f"cargo {args[0]} failed with exit code {completed.returncode}",
            )


def _verbosity_args(verbosity: Verbosity | None) -> list[str]:
    if verbosity is Verbosity.QUIET:
        return ["--quiet"]
    if verbosity is Verbosity.VERBOSE:
        return ["--verbose"]
    return []


def _override_args(unstable_flags: UnstableFlags) -> list[str]:
    if unstable_flags.original_manifest:
        return []
    args: list[str] = []
    for override in OPTIMISATION_OVERRIDES:
        args += ["--config", override]
    return args


def _release_artifact(metadata: CrateMetadata, crate: str) -> Path:
    lib_name = crate.replace("-", "_")
    return metadata.target_directory / WASM_TARGET / "release" / f"{lib_name}.wasm"


def _copy_artifact(source: Path, destination: Path) -> None:
    if not source.is_file():
        raise BuildError(f"Expected build artifact not found: {source}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    logger.debug("Copied %s -> %s", source, destination)


def _camel_case(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


# ---------------------------------------------------------------------------
# Project templates
# ---------------------------------------------------------------------------

_CARGO_TOML = """\
[package]
name = "{name}"
version = "0.1.0"
edition = "2018"

[dependencies]
ink_core = {{ version = "2", package = "ink_core", default-features = false }}
ink_lang = {{ version = "2", package = "ink_lang", default-features = false }}
scale = {{ package = "parity-scale-codec", version = "1.3", default-features = false, features = ["derive"] }}

[lib]
name = "{name}"
path = "lib.rs"
crate-type = ["cdylib", "rlib"]

[features]
default = ["std"]
std = ["ink_core/std", "scale/std"]
ink-generate-abi = ["std"]

[workspace]
members = [".ink/abi_gen"]
"""

_LIB_RS = """\
#![cfg_attr(not(feature = "std"), no_std)]

use ink_lang as ink;

#[ink::contract(version = "0.1.0")]
mod {name} {{
    #[ink(storage)]
    struct {camel} {{
        value: ink_core::storage::Value<bool>,
    }}

    impl {camel} {{
        #[ink(constructor)]
        fn new(&mut self, init_value: bool) {{
            self.value.set(init_value);
        }}

        #[ink(message)]
        fn flip(&mut self) {{
            *self.value = !self.get();
        }}

        #[ink(message)]
        fn get(&self) -> bool {{
            *self.value
        }}
    }}
}}
"""

_GITIGNORE = """\
# Ignore build artifacts from the local tests sub-crate.
/target/

# Ignore backup files created by cargo fmt.
**/*.rs.bk

# Remove Cargo.lock when creating an executable, leave it for libraries
Cargo.lock
"""

_ABI_GEN_CARGO_TOML = """\
[package]
name = "abi-gen"
version = "0.1.0"
edition = "2018"
publish = false

[[bin]]
name = "abi-gen"
path = "main.rs"

[dependencies]
contract = {{ path = "../..", package = "{name}", default-features = false, features = ["ink-generate-abi"] }}
ink_lang = {{ version = "2", default-features = false, features = ["ink-generate-abi"] }}
serde = "1.0"
serde_json = "1.0"
"""

_ABI_GEN_MAIN_RS = """\
fn main() -> Result<(), std::io::Error> {{
    let abi = <contract::{camel} as ink_lang::GenerateAbi>::generate_abi();
    let contents = serde_json::to_string_pretty(&abi)?;
    std::fs::create_dir("target").ok();
    std::fs::write("target/metadata.json", contents)?;
    Ok(())
}}
"""
