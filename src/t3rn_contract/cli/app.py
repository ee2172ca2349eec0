"""CLI application entry point and command routing for t3rn-contract.

This module is the **sole error boundary** for the entire application.
It turns argv into exactly one :data:`~t3rn_contract.core.commands.Command`,
dispatches it, and renders either one result line on stdout or one
``ERROR:`` line on stderr.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* ``print()`` is forbidden outside the CLI layer; the console proxies are
  used exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from t3rn_contract.cli import exit_codes
from t3rn_contract.cli.console import console, escape, out
from t3rn_contract.core.commands import (
    DEFAULT_CONTRACT_GAS_LIMIT,
    DEFAULT_GAS_LIMIT,
    DEFAULT_URL,
    BuildCommand,
    CallContractCommand,
    CallContractsGatewayCommand,
    CallRuntimeGatewayCommand,
    Command,
    ComposableBuildCommand,
    ComposableDeployCommand,
    DeployCommand,
    GenerateMetadataCommand,
    InstantiateCommand,
    NewCommand,
    TestCommand,
)
from t3rn_contract.core.flags import validate_unstable_options, validate_verbosity
from t3rn_contract.core.models import CodeHash, CrateMetadata, ExtrinsicOpts, HexData
from t3rn_contract.core.urls import validate_endpoint_url
from t3rn_contract.exceptions import CommandUnimplementedError, ContractToolError
from t3rn_contract.version import __version__


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

def _default_metadata_loader() -> CrateMetadata:
    from t3rn_contract.infra.manifest import collect_metadata

    return collect_metadata()


def _default_toolchain() -> Any:
    from t3rn_contract.infra.cargo_toolchain import CargoToolchain

    return CargoToolchain()


def _default_extrinsic_service() -> Any:
    from t3rn_contract.core.extrinsic_service import ExtrinsicService
    from t3rn_contract.infra.code_loader import FileCodeLoader
    from t3rn_contract.infra.signer import SubstrateKeyDeriver
    from t3rn_contract.infra.substrate_client import SubstrateChainClient

    return ExtrinsicService(
        SubstrateChainClient(),
        SubstrateKeyDeriver(),
        FileCodeLoader(),
    )


@dataclass
class Services:
    """Factories for the collaborators a command may need.

    Everything is built lazily so that commands never import libraries
    they do not use.
    """

    metadata_loader: Callable[[], CrateMetadata] = _default_metadata_loader
    toolchain_factory: Callable[[], Any] = _default_toolchain
    extrinsic_factory: Callable[[], Any] = _default_extrinsic_service
    _cache: dict[str, Any] = field(default_factory=dict, repr=False)

    def metadata(self) -> CrateMetadata:
        return self.metadata_loader()

    def toolchain(self) -> Any:
        if "toolchain" not in self._cache:
            self._cache["toolchain"] = self.toolchain_factory()
        return self._cache["toolchain"]

    def extrinsics(self) -> Any:
        if "extrinsics" not in self._cache:
            self._cache["extrinsics"] = self.extrinsic_factory()
        return self._cache["extrinsics"]


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _unsigned(value: str) -> int:
    """argparse type for unsigned integers."""
    try:
        number = int(value, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid unsigned integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"value must not be negative: {value}")
    return number


def _build_flags_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--quiet", action="store_true", help="No output printed to stdout.")
    parent.add_argument("--verbose", action="store_true", help="Use verbose output.")
    parent.add_argument(
        "-Z",
        "--unstable-options",
        dest="unstable_options",
        action="append",
        metavar="NAME",
        help=(
            "Unstable option, may be repeated. 'original-manifest': use the "
            "original manifest (Cargo.toml), do not modify for build optimizations."
        ),
    )
    return parent


def _build_extrinsic_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--url",
        default=DEFAULT_URL,
        help=f"Websockets url of a substrate node (default: {DEFAULT_URL}).",
    )
    parent.add_argument(
        "-s",
        "--suri",
        required=True,
        help="Secret key URI for the account deploying the contract.",
    )
    parent.add_argument("-p", "--password", default=None, help="Password for the secret key.")
    return parent


def _add_call_arguments(
    parser: argparse.ArgumentParser, *, gas_limit: int, with_phase: bool = True,
) -> None:
    if with_phase:
        parser.add_argument("--phase", type=_unsigned, default=0, help="Execution phase.")
    parser.add_argument(
        "--value",
        type=_unsigned,
        default=0,
        help="Value of balance transfer optionally attached to the execution order.",
    )
    parser.add_argument(
        "--gas",
        dest="gas_limit",
        type=_unsigned,
        default=gas_limit,
        help=f"Maximum amount of gas to be used for this command (default: {gas_limit}).",
    )
    parser.add_argument(
        "--data", default="00", help="Hex encoded call data (default: 00).",
    )


def _build_parser(*, extrinsics: bool) -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The extrinsic subcommands are only registered when *extrinsics* is
    true.
    """
    parser = argparse.ArgumentParser(
        prog="t3rn-contract",
        description="Utilities to develop Wasm smart contracts.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>")
    flags = _build_flags_parent()

    new = sub.add_parser("new", help="Setup and create a new smart contract project.")
    new.add_argument("name", help="The name of the newly created smart contract.")
    new.add_argument(
        "-t",
        "--target-dir",
        type=Path,
        default=None,
        help="The optional target directory for the contract project.",
    )
    sub.add_parser("build", parents=[flags], help="Compiles the smart contract.")
    sub.add_parser(
        "composable-build",
        parents=[flags],
        help="Compiles all of the composable smart contracts described in the schedule.",
    )
    sub.add_parser(
        "generate-metadata", parents=[flags], help="Generate contract metadata artifacts.",
    )
    sub.add_parser("test", help="Test the smart contract off-chain.")

    if extrinsics:
        _register_extrinsic_commands(sub)

    return parser


def _register_extrinsic_commands(sub: Any) -> None:
    ext = _build_extrinsic_parent()
    wasm_help = "Path to wasm contract code, defaults to ./target/<name>-pruned.wasm"

    deploy = sub.add_parser(
        "deploy", parents=[ext], help="Upload the smart contract code to the chain.",
    )
    deploy.add_argument("wasm_path", nargs="?", type=Path, default=None, help=wasm_help)

    composable = sub.add_parser(
        "composable-deploy",
        help="Upload all smart contracts selected in the composable schedule to their chains.",
    )
    composable.add_argument(
        "-s", "--suri", required=True,
        help="Secret key URI for the account deploying the contract.",
    )

    instantiate = sub.add_parser(
        "instantiate", parents=[ext], help="Instantiate a deployed smart contract.",
    )
    instantiate.add_argument(
        "--endowment",
        type=_unsigned,
        default=0,
        help="Transfers an initial balance to the instantiated contract.",
    )
    instantiate.add_argument(
        "--gas",
        dest="gas_limit",
        type=_unsigned,
        default=DEFAULT_GAS_LIMIT,
        help=f"Maximum amount of gas to be used for this command (default: {DEFAULT_GAS_LIMIT}).",
    )
    instantiate.add_argument(
        "--code-hash",
        required=True,
        help="The hash of the smart contract code already uploaded to the chain.",
    )
    instantiate.add_argument(
        "--data", required=True, help="Hex encoded data to call a contract constructor.",
    )

    runtime = sub.add_parser(
        "call-runtime-gateway",
        parents=[ext],
        help="Call for smart contract execution on the Runtime Gateway.",
    )
    runtime.add_argument("-t", "--target", required=True, help="Secret URI of the target account.")
    runtime.add_argument(
        "-r", "--requester", required=True, help="Secret URI of the requester account.",
    )
    _add_call_arguments(runtime, gas_limit=DEFAULT_GAS_LIMIT)
    runtime.add_argument("wasm_path", nargs="?", type=Path, default=None, help=wasm_help)

    contracts = sub.add_parser(
        "call-contracts-gateway",
        parents=[ext],
        help="Call for smart contract execution on the Contracts Gateway.",
    )
    contracts.add_argument(
        "--target", default="00", help="Hex encoded target account id.",
    )
    contracts.add_argument(
        "-r", "--requester", required=True, help="Secret URI of the requester account.",
    )
    _add_call_arguments(contracts, gas_limit=DEFAULT_CONTRACT_GAS_LIMIT)
    contracts.add_argument("wasm_path", nargs="?", type=Path, default=None, help=wasm_help)

    call = sub.add_parser(
        "call-contract",
        parents=[ext],
        help="Call a regular smart contract execution via Contracts Pallet Call.",
    )
    call.add_argument("--target", default="00", help="Hex encoded target account id.")
    _add_call_arguments(call, gas_limit=DEFAULT_CONTRACT_GAS_LIMIT, with_phase=False)


# ---------------------------------------------------------------------------
# argv -> Command
# ---------------------------------------------------------------------------

def _extrinsic_opts(args: argparse.Namespace) -> ExtrinsicOpts:
    return ExtrinsicOpts(
        url=validate_endpoint_url(args.url),
        suri=args.suri,
        password=args.password,
    )


def _toolchain_command(command_cls: type) -> Callable[[argparse.Namespace], Command]:
    def build(args: argparse.Namespace) -> Command:
        return command_cls(
            verbosity=validate_verbosity(args.quiet, args.verbose),
            unstable_flags=validate_unstable_options(args.unstable_options or []),
        )

    return build


def _deploy_command(args: argparse.Namespace) -> Command:
    return DeployCommand(extrinsic_opts=_extrinsic_opts(args), wasm_path=args.wasm_path)


def _instantiate_command(args: argparse.Namespace) -> Command:
    return InstantiateCommand(
        extrinsic_opts=_extrinsic_opts(args),
        code_hash=CodeHash.from_hex(args.code_hash),
        data=HexData.from_hex(args.data),
        endowment=args.endowment,
        gas_limit=args.gas_limit,
    )


def _call_runtime_gateway_command(args: argparse.Namespace) -> Command:
    return CallRuntimeGatewayCommand(
        extrinsic_opts=_extrinsic_opts(args),
        target=args.target,
        requester=args.requester,
        phase=args.phase,
        value=args.value,
        gas_limit=args.gas_limit,
        wasm_path=args.wasm_path,
        data=HexData.from_hex(args.data),
    )


def _call_contracts_gateway_command(args: argparse.Namespace) -> Command:
    return CallContractsGatewayCommand(
        extrinsic_opts=_extrinsic_opts(args),
        requester=args.requester,
        target=HexData.from_hex(args.target),
        phase=args.phase,
        value=args.value,
        gas_limit=args.gas_limit,
        wasm_path=args.wasm_path,
        data=HexData.from_hex(args.data),
    )


def _call_contract_command(args: argparse.Namespace) -> Command:
    return CallContractCommand(
        extrinsic_opts=_extrinsic_opts(args),
        target=HexData.from_hex(args.target),
        value=args.value,
        gas_limit=args.gas_limit,
        data=HexData.from_hex(args.data),
    )


# Keyed by subcommand name; must cover every parser built by _build_parser.
_BUILDERS: dict[str, Callable[[argparse.Namespace], Command]] = {
    "new": lambda args: NewCommand(name=args.name, target_dir=args.target_dir),
    "build": _toolchain_command(BuildCommand),
    "composable-build": _toolchain_command(ComposableBuildCommand),
    "generate-metadata": _toolchain_command(GenerateMetadataCommand),
    "test": lambda args: TestCommand(),
    "composable-deploy": lambda args: ComposableDeployCommand(suri=args.suri),
    "deploy": _deploy_command,
    "instantiate": _instantiate_command,
    "call-runtime-gateway": _call_runtime_gateway_command,
    "call-contracts-gateway": _call_contracts_gateway_command,
    "call-contract": _call_contract_command,
}


def _to_command(args: argparse.Namespace) -> Command:
    """Validate parsed arguments into a :data:`Command`.

    Raises
    ------
    ContractToolError
        For conflicting flags, unknown options, bad hex or bad URLs.
    """
    return _BUILDERS[args.command](args)


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_new(cmd: NewCommand, services: Services) -> str:
    services.toolchain().new_project(cmd.name, cmd.target_dir)
    return f"Created contract {cmd.name}"


def _handle_build(cmd: BuildCommand, services: Services) -> str:
    dest_wasm = services.toolchain().build(
        services.metadata(), cmd.verbosity, cmd.unstable_flags,
    )
    return f"Your contract is ready. You can find it here: {dest_wasm}"


def _handle_composable_build(cmd: ComposableBuildCommand, services: Services) -> str:
    dest_dir = services.toolchain().composable_build(
        services.metadata(), cmd.verbosity, cmd.unstable_flags,
    )
    return (
        "Your composable contract(s) is/are ready. "
        f"You can find it the following directory: {dest_dir}"
    )


def _handle_generate_metadata(cmd: GenerateMetadataCommand, services: Services) -> str:
    metadata_file = services.toolchain().generate_metadata(
        services.metadata(), cmd.verbosity, cmd.unstable_flags,
    )
    return f"Your metadata file is ready. You can find it here: {metadata_file}"


def _handle_test(_cmd: TestCommand, _services: Services) -> str:
    raise CommandUnimplementedError("Command unimplemented")


def _handle_deploy(cmd: DeployCommand, services: Services) -> str:
    code_hash = services.extrinsics().deploy(cmd.extrinsic_opts, cmd.wasm_path)
    return f"Code hash: {code_hash}"


def _handle_composable_deploy(cmd: ComposableDeployCommand, services: Services) -> str:
    from t3rn_contract.cli.progress import DeployProgressReporter
    from t3rn_contract.core.composable_service import ComposableDeployService

    metadata = services.metadata()
    service = ComposableDeployService(services.extrinsics())
    targets = service.targets(metadata)

    out.print("[bold bright_blue]Deploy composable components to appointed urls[/bold bright_blue]")
    with DeployProgressReporter(total=len(targets)) as reporter:
        report = service.deploy_all(cmd.suri, metadata, on_deployed=reporter)
    return report.message


def _handle_instantiate(cmd: InstantiateCommand, services: Services) -> str:
    contract_account = services.extrinsics().instantiate(
        cmd.extrinsic_opts, cmd.endowment, cmd.gas_limit, cmd.code_hash, cmd.data,
    )
    return f"Contract account: {contract_account}"


def _handle_call_runtime_gateway(cmd: CallRuntimeGatewayCommand, services: Services) -> str:
    result = services.extrinsics().call_runtime_gateway(
        cmd.extrinsic_opts,
        requester=cmd.requester,
        target=cmd.target,
        phase=cmd.phase,
        value=cmd.value,
        gas_limit=cmd.gas_limit,
        data=cmd.data,
        wasm_path=cmd.wasm_path,
    )
    return f"CallRuntimeGateway result: {result}"


def _handle_call_contracts_gateway(cmd: CallContractsGatewayCommand, services: Services) -> str:
    result = services.extrinsics().call_contracts_gateway(
        cmd.extrinsic_opts,
        requester=cmd.requester,
        target=cmd.target,
        phase=cmd.phase,
        value=cmd.value,
        gas_limit=cmd.gas_limit,
        data=cmd.data,
        wasm_path=cmd.wasm_path,
    )
    return f"CallRuntimeGateway result: {result}"


def _handle_call_contract(cmd: CallContractCommand, services: Services) -> str:
    result = services.extrinsics().call_contract(
        cmd.extrinsic_opts,
        target=cmd.target,
        value=cmd.value,
        gas_limit=cmd.gas_limit,
        data=cmd.data,
    )
    return f"Call regular contract result: {result}"


_HANDLERS: dict[type, Callable[[Any, Services], str]] = {
    NewCommand: _handle_new,
    BuildCommand: _handle_build,
    ComposableBuildCommand: _handle_composable_build,
    GenerateMetadataCommand: _handle_generate_metadata,
    TestCommand: _handle_test,
    DeployCommand: _handle_deploy,
    ComposableDeployCommand: _handle_composable_deploy,
    InstantiateCommand: _handle_instantiate,
    CallRuntimeGatewayCommand: _handle_call_runtime_gateway,
    CallContractsGatewayCommand: _handle_call_contracts_gateway,
    CallContractCommand: _handle_call_contract,
}


def execute(command: Command, services: Services | None = None) -> str:
    """Run exactly one command and return its success message.

    Raises
    ------
    ContractToolError
        Whatever the underlying operation raised, unchanged.
    """
    handler = _HANDLERS[type(command)]
    return handler(command, services if services is not None else Services())


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def format_error_chain(exc: BaseException) -> str:
    """Join *exc* and its explicit causes as ``msg: cause: cause``."""
    parts: list[str] = []
    current: BaseException | None = exc
    while current is not None:
        text = str(current) or type(current).__name__
        if not any(text in part for part in parts):
            parts.append(text)
        current = current.__cause__
    return ": ".join(parts)


def render_error(exc: ContractToolError) -> None:
    """Print the single ``ERROR:`` line for *exc* on stderr."""
    line = format_error_chain(exc)
    if exc.hint:
        line += " (hint: " + "; ".join(
            part.strip() for part in exc.hint.splitlines() if part.strip()
        ) + ")"
    console.print(f"[bold bright_red]ERROR:[/bold bright_red] [bright_red]{escape(line)}[/bright_red]")


def render_success(message: str) -> None:
    """Print the indented result line on stdout."""
    out.print(f"\t{escape(message)}")


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    extrinsics: bool | None = None,
    services: Services | None = None,
) -> int:
    """Run the t3rn-contract CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    extrinsics:
        Force the extrinsic commands on or off; ``None`` asks
        :func:`~t3rn_contract.infra.capabilities.extrinsics_enabled`.
    services:
        Collaborator factories; defaults to the real infrastructure.

    Returns
    -------
    int
        OS process exit code.
    """
    from t3rn_contract.cli.logging_setup import configure_logging, level_for, level_from_env
    from t3rn_contract.infra.capabilities import extrinsics_enabled

    if extrinsics is None:
        extrinsics = extrinsics_enabled()
    parser = _build_parser(extrinsics=extrinsics)
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    try:
        command = _to_command(args)
        configure_logging(level_for(getattr(command, "verbosity", None), level_from_env()))
        message = execute(command, services)
    except ContractToolError as exc:
        render_error(exc)
        return exit_codes.GENERAL_ERROR

    render_success(message)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
