"""Process exit statuses of ``t3rn-contract``.

Every command either prints its result line and exits with
:data:`SUCCESS`, or prints one ``ERROR:`` line and exits with
:data:`GENERAL_ERROR`.  The remaining values belong to the script-level
boundary in :func:`t3rn_contract.cli.app.cli`; argparse exits with 2 on
its own.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The command ran and its result line was printed."""

GENERAL_ERROR: int = 1
"""A ContractToolError ended the command; the ERROR line was printed."""

UNEXPECTED_ERROR: int = 2
"""A non-domain exception reached the script boundary."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
