"""``python -m t3rn_contract``: same entry point as the console script."""

from __future__ import annotations

from t3rn_contract.cli.app import cli

if __name__ == "__main__":
    cli()
