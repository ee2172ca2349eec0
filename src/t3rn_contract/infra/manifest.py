"""Infrastructure: reading the project's ``Cargo.toml``.

Only the package name and the optional composable schedule are read.
Schedule layout::

    [package.metadata.composable_schedule]
    deploy = [
        { compose = "flipper", url = "ws://localhost:9944" },
        { compose = "erc20", url = "ws://localhost:9945" },
    ]
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Final

from t3rn_contract.core.models import ComposableSchedule, CrateMetadata, DeployTarget
from t3rn_contract.core.urls import validate_endpoint_url
from t3rn_contract.exceptions import InvalidURLError, MetadataReadError

DEFAULT_MANIFEST: Final[str] = "Cargo.toml"
SCHEDULE_KEY: Final[str] = "composable_schedule"


def collect_metadata(manifest_path: Path | None = None) -> CrateMetadata:
    """Read *manifest_path* (default ``./Cargo.toml``) into :class:`CrateMetadata`.

    Raises
    ------
    MetadataReadError
        If the manifest is missing, not valid TOML, lacks ``[package].name``
        or declares a malformed composable schedule.
    """
    path = manifest_path if manifest_path is not None else Path(DEFAULT_MANIFEST)
    payload = _load_toml(path)

    package = payload.get("package")
    if not isinstance(package, dict) or not isinstance(package.get("name"), str):
        raise MetadataReadError(f"No [package] name found in {path}")

    metadata = package.get("metadata")
    schedule: ComposableSchedule | None = None
    if isinstance(metadata, dict) and SCHEDULE_KEY in metadata:
        schedule = _parse_schedule(metadata[SCHEDULE_KEY], path)

    return CrateMetadata(
        package_name=package["name"],
        manifest_path=path.absolute(),
        composable_schedule=schedule,
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise MetadataReadError(
            f"Manifest not found: {path}",
            hint="Run this command from the root of a contract project.",
        ) from exc
    except OSError as exc:
        raise MetadataReadError(f"Failed to read manifest {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise MetadataReadError(f"Invalid TOML in {path}: {exc}") from exc


def _parse_schedule(raw: object, path: Path) -> ComposableSchedule:
    if not isinstance(raw, dict):
        raise _malformed(path, f"[package.metadata.{SCHEDULE_KEY}] must be a table")

    raw_deploy = raw.get("deploy")
    if raw_deploy is None:
        return ComposableSchedule(deploy=None)
    if not isinstance(raw_deploy, list):
        raise _malformed(path, "'deploy' must be an array of tables")

    targets: list[DeployTarget] = []
    for index, entry in enumerate(raw_deploy):
        if not isinstance(entry, dict):
            raise _malformed(path, f"deploy[{index}] must be a table")
        compose = entry.get("compose")
        url = entry.get("url")
        if not isinstance(compose, str) or not compose:
            raise _malformed(path, f"deploy[{index}] is missing 'compose'")
        if not isinstance(url, str):
            raise _malformed(path, f"deploy[{index}] is missing 'url'")
        try:
            validate_endpoint_url(url)
        except InvalidURLError as exc:
            raise _malformed(path, f"deploy[{index}]: {exc}") from exc
        targets.append(DeployTarget(compose=compose, url=url))

    return ComposableSchedule(deploy=tuple(targets))


def _malformed(path: Path, detail: str) -> MetadataReadError:
    return MetadataReadError(
        f"Failed to read composable metadata from {path}: {detail}",
        hint="Make sure your Cargo.toml follows the composable metadata format.",
    )
