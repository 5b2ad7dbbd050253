"""Main CLI entry point for the node age controller."""

import signal
import threading
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from node_age_controller.exceptions import NodeAgeControllerError
from node_age_controller.logging_config import get_logger, setup_logging
from node_age_controller.models.policy import PolicyConfig

app = typer.Typer(
    name="node-age-controller",
    help="Cordon Kubernetes nodes that exceed a maximum age",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", "--development", help="Enable verbose (development) logging"
    ),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, log_file=log_path)
    logger.debug("Logging initialized")


def build_policy_config(
    config_file: str | None,
    dry_run: bool | None,
    max_nodes: int | None,
    min_available_nodes: int | None,
    max_node_age: str | None,
) -> PolicyConfig:
    """Combine the optional YAML config file with command line values.

    Command line values (and their environment variables) win over the file;
    anything left unset falls back to the PolicyConfig defaults.
    """
    overrides = {
        "dry_run": dry_run,
        "max_cordoned_nodes": max_nodes,
        "min_available_nodes": min_available_nodes,
        "max_node_age": max_node_age,
    }
    if config_file:
        return PolicyConfig.load(config_file, **overrides)
    return PolicyConfig(**{k: v for k, v in overrides.items() if v is not None})


def _load_config_or_exit(config_file, dry_run, max_nodes, min_available_nodes, max_node_age):
    try:
        return build_policy_config(
            config_file, dry_run, max_nodes, min_available_nodes, max_node_age
        )
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] Config file not found: {config_file}")
        raise typer.Exit(code=1)
    except yaml.YAMLError as e:
        console.print(f"[red]Error:[/red] Failed to parse config file {config_file}: {e}")
        raise typer.Exit(code=1)
    except ValidationError as e:
        console.print("[red]Error:[/red] Invalid policy configuration")
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"]) or "config"
            console.print(f"  {field}: {error['msg']}")
        raise typer.Exit(code=1)


def _report_error(e: NodeAgeControllerError) -> None:
    logger.error(e.message)
    console.print(f"[red]Error:[/red] {e.message}")
    if e.details:
        console.print(f"\n{e.details}")


DRY_RUN_OPTION = typer.Option(
    False,
    "--dry-run",
    envvar="DRY_RUN",
    help="Don't operate on nodes, only log what would happen",
)
MAX_NODES_OPTION = typer.Option(
    None,
    "--max-nodes",
    envvar="MAX_NODES",
    help="The max number of nodes that can be cordoned at one time (default 3)",
)
MIN_AVAILABLE_OPTION = typer.Option(
    None,
    "--min-available-nodes",
    envvar="MIN_AVAILABLE_NODES",
    help="How many nodes must be uncordoned before we attempt to cordon a node (default 3)",
)
MAX_NODE_AGE_OPTION = typer.Option(
    None,
    "--max-node-age",
    envvar="MAX_NODE_AGE",
    help="How old a node may be before we cordon it, e.g. 720h or 30d (default 720h)",
)
CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="YAML file with policy settings; flags take precedence"
)
KUBECONFIG_OPTION = typer.Option(
    None, "--kubeconfig", envvar="KUBECONFIG", help="Path to kubeconfig (default: ~/.kube/config)"
)


@app.command()
def version() -> None:
    """Show version information."""
    from node_age_controller import __version__

    typer.echo(f"node-age-controller version {__version__}")


@app.command()
def run(
    dry_run: bool = DRY_RUN_OPTION,
    max_nodes: int | None = MAX_NODES_OPTION,
    min_available_nodes: int | None = MIN_AVAILABLE_OPTION,
    max_node_age: str | None = MAX_NODE_AGE_OPTION,
    config_file: str | None = CONFIG_OPTION,
    kubeconfig: str | None = KUBECONFIG_OPTION,
    resync_seconds: int = typer.Option(
        300, "--resync-seconds", help="Seconds between full reconciles of every node"
    ),
) -> None:
    """
    Run the controller until interrupted.

    Every node that is added or modified is reconciled: nodes older than
    --max-node-age are cordoned, unless the cluster already has --max-nodes
    cordoned nodes or only --min-available-nodes schedulable ones.
    """
    from node_age_controller.controller import NodeController
    from node_age_controller.kube import KubernetesNodeClient
    from node_age_controller.policy import ReconciliationPolicy

    policy_config = _load_config_or_exit(
        config_file, dry_run or None, max_nodes, min_available_nodes, max_node_age
    )
    logger.info(
        f"Policy: max_node_age={policy_config.max_node_age}, "
        f"max_cordoned_nodes={policy_config.max_cordoned_nodes}, "
        f"min_available_nodes={policy_config.min_available_nodes}, "
        f"dry_run={policy_config.dry_run}"
    )

    try:
        node_client = KubernetesNodeClient.from_kubeconfig(kubeconfig)
        policy = ReconciliationPolicy(node_client, policy_config)
        controller = NodeController(node_client, policy, resync_seconds=resync_seconds)

        stop = threading.Event()
        signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())
        controller.run(stop)

    except NodeAgeControllerError as e:
        _report_error(e)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Controller interrupted by user[/yellow]")
        raise typer.Exit(code=130)


@app.command()
def check(
    node: str = typer.Argument(..., help="Name of the node to reconcile"),
    dry_run: bool = DRY_RUN_OPTION,
    max_nodes: int | None = MAX_NODES_OPTION,
    min_available_nodes: int | None = MIN_AVAILABLE_OPTION,
    max_node_age: str | None = MAX_NODE_AGE_OPTION,
    config_file: str | None = CONFIG_OPTION,
    kubeconfig: str | None = KUBECONFIG_OPTION,
) -> None:
    """
    Reconcile a single node once and show the decision.

    Examples:
        # See what would happen to a node without touching it
        node-age-controller check worker-1 --dry-run
    """
    from node_age_controller.classifier import format_age
    from node_age_controller.kube import KubernetesNodeClient
    from node_age_controller.policy import ReconciliationPolicy

    policy_config = _load_config_or_exit(
        config_file, dry_run or None, max_nodes, min_available_nodes, max_node_age
    )

    try:
        node_client = KubernetesNodeClient.from_kubeconfig(kubeconfig)
        decision = ReconciliationPolicy(node_client, policy_config).reconcile(node)
    except NodeAgeControllerError as e:
        _report_error(e)
        raise typer.Exit(code=1)

    age = f" (age {format_age(decision.age)})" if decision.age is not None else ""
    if decision.cordoned:
        console.print(f"[green]✓ Cordoned node {node}[/green]{age}")
    else:
        console.print(f"[yellow]Skipped node {node}:[/yellow] {decision.reason.value}{age}")


@app.command()
def status(
    max_nodes: int | None = MAX_NODES_OPTION,
    min_available_nodes: int | None = MIN_AVAILABLE_OPTION,
    max_node_age: str | None = MAX_NODE_AGE_OPTION,
    config_file: str | None = CONFIG_OPTION,
    kubeconfig: str | None = KUBECONFIG_OPTION,
) -> None:
    """
    Show every node's age and how the policy classifies it.

    Nothing is modified. The summary shows whether the cluster-wide
    thresholds currently block further cordons.
    """
    from node_age_controller.classifier import (
        age_of,
        format_age,
        is_control_plane,
        is_cordoned,
        is_ignored,
    )
    from node_age_controller.kube import KubernetesNodeClient
    from node_age_controller.policy import utc_now
    from node_age_controller.threshold import count_cordoned, evaluate

    policy_config = _load_config_or_exit(
        config_file, None, max_nodes, min_available_nodes, max_node_age
    )

    try:
        snapshot = KubernetesNodeClient.from_kubeconfig(kubeconfig).list_nodes()
    except NodeAgeControllerError as e:
        _report_error(e)
        raise typer.Exit(code=1)

    if not snapshot.nodes:
        console.print("[yellow]No nodes found in the cluster[/yellow]")
        return

    blocked = evaluate(snapshot, policy_config)
    now = utc_now()

    table = Table(title=f"Cluster Nodes ({len(snapshot.nodes)})")
    table.add_column("Name", style="cyan")
    table.add_column("Age")
    table.add_column("Control Plane", style="magenta")
    table.add_column("Ignored", style="yellow")
    table.add_column("Cordoned", style="red")
    table.add_column("Eligible", style="green")

    for node in sorted(snapshot.nodes, key=lambda n: n.name):
        age = age_of(node, now)
        eligible = not (
            is_control_plane(node)
            or is_ignored(node)
            or is_cordoned(node)
            or age <= policy_config.max_node_age
        )
        if eligible and blocked:
            eligible_str = "[yellow]blocked[/yellow]"
        else:
            eligible_str = "Yes" if eligible else "No"

        table.add_row(
            node.name,
            format_age(age),
            "Yes" if is_control_plane(node) else "No",
            "Yes" if is_ignored(node) else "No",
            "Yes" if is_cordoned(node) else "No",
            eligible_str,
        )

    console.print(table)

    cordoned = count_cordoned(snapshot)
    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Total Nodes: {len(snapshot.nodes)}")
    console.print(f"  Cordoned: {cordoned} (max {policy_config.max_cordoned_nodes})")
    console.print(
        f"  Available: {len(snapshot.nodes) - cordoned} "
        f"(min {policy_config.min_available_nodes})"
    )
    console.print(f"  Max Node Age: {format_age(policy_config.max_node_age)}")

    if blocked:
        console.print("\n[yellow]⚠ Threshold met, no further nodes will be cordoned[/yellow]")
    else:
        console.print("\n[green]✓ Threshold not met, old nodes may be cordoned[/green]")


if __name__ == "__main__":
    app()
