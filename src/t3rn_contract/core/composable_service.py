"""Composable deploy — one code upload per scheduled component.

Targets are deployed strictly in schedule order, one at a time.  The
first failure aborts the run and propagates; components already uploaded
stay uploaded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from t3rn_contract.core.extrinsic_service import ExtrinsicService
from t3rn_contract.core.models import (
    CodeHash,
    ComposableDeployReport,
    CrateMetadata,
    DeployTarget,
    ExtrinsicOpts,
)
from t3rn_contract.exceptions import MetadataReadError, NothingToDeployError

logger = logging.getLogger(__name__)

DeployCallback = Callable[[DeployTarget, CodeHash], None]


class ComposableDeployService:
    """Deploy every component of a composable schedule.

    Parameters
    ----------
    extrinsics:
        The single-target service used for each upload.
    """

    def __init__(self, extrinsics: ExtrinsicService) -> None:
        self._extrinsics: ExtrinsicService = extrinsics

    def deploy_all(
        self,
        suri: str,
        metadata: CrateMetadata,
        *,
        on_deployed: DeployCallback | None = None,
    ) -> ComposableDeployReport:
        """Upload each scheduled component to its node, in order.

        *on_deployed* is invoked after every successful upload, before
        the next one starts.

        Raises
        ------
        MetadataReadError
            If the manifest declares no composable schedule.
        NothingToDeployError
            If the schedule's deploy list is absent or empty.
        ContractToolError
            The first failure of any single deploy, unchanged.
        """
        targets = self.targets(metadata)
        account = self._extrinsics.signer_account(suri)
        deployed: list[tuple[DeployTarget, CodeHash]] = []

        for target in targets:
            logger.info("Deploying %s to %s", target.compose, target.url)
            opts = ExtrinsicOpts(url=target.url, suri=suri, password=None)
            code_hash = self._extrinsics.deploy(
                opts, metadata.composable_wasm_path(target.compose),
            )
            deployed.append((target, code_hash))
            if on_deployed is not None:
                on_deployed(target, code_hash)

        return ComposableDeployReport(account=account, deployed=tuple(deployed))

    @staticmethod
    def targets(metadata: CrateMetadata) -> tuple[DeployTarget, ...]:
        """Return the ordered deploy targets declared in *metadata*."""
        schedule = metadata.composable_schedule
        if schedule is None:
            raise MetadataReadError(
                "Failed to read composable metadata from "
                f"{metadata.manifest_path}",
                hint=(
                    "Make sure your Cargo.toml declares a "
                    "[package.metadata.composable_schedule] section."
                ),
            )
        if not schedule.deploy:
            raise NothingToDeployError(
                "Nothing to deploy. Empty deploy key of composable metadata.",
            )
        return schedule.deploy
