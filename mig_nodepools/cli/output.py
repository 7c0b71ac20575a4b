"""Rich console output helpers for the mig-nodepools CLI."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mig_nodepools.constants import HIGH_NODE_COUNT

console = Console()


def banner(text):
  """Display a styled banner."""
  console.print(Panel(f"  {text}", style="bold blue"))


def success(msg):
  """Display a success message."""
  console.print(f"[green]{msg}[/green]")


def warning(msg):
  """Display a warning message."""
  console.print(f"[yellow]{msg}[/yellow]")


def error(msg):
  """Display an error message."""
  console.print(f"[red]{msg}[/red]")


def gpu_pools_table(descriptors):
  """Display GPU node pools as a table."""
  table = Table(title="GPU Node Pools")
  table.add_column("Name", style="bold")
  table.add_column("Status")
  table.add_column("Machine Type")
  table.add_column("Initial Nodes", justify="right")
  table.add_column("Accelerator", style="green")

  for d in descriptors:
    accel = d.accelerator_type or "-"
    if d.accelerator_count:
      accel = f"{accel} x{d.accelerator_count}"
    table.add_row(
      d.name,
      d.status or "-",
      d.machine_type or "-",
      "-" if d.initial_node_count is None else str(d.initial_node_count),
      accel,
    )

  console.print()
  console.print(table)
  console.print()


def node_count_report(descriptor):
  """Report the node count of one pool, warning on empty or large pools."""
  count = descriptor.initial_node_count or 0
  if count == 0:
    warning(f"Node pool '{descriptor.name}' has 0 nodes")
  elif count > HIGH_NODE_COUNT:
    warning(
      f"Node pool '{descriptor.name}' has a high node count: {count} nodes"
    )
  else:
    console.print(f"Node pool '{descriptor.name}' has {count} node(s)")


_SUMMARY_FIELDS = (
  ("Machine Type", "machine_type"),
  ("Image Type", "image_type"),
  ("Disk Type", "disk_type"),
  ("Disk Size (GB)", "disk_size_gb"),
  ("Service Account", "service_account"),
  ("Node Count", "node_count"),
  ("Accelerator Type", "accelerator_type"),
  ("Accelerator Count", "accelerator_count"),
  ("GPU Driver Version", "gpu_driver_version"),
  ("Preemptible", "preemptible"),
  ("Spot", "spot"),
  ("Auto Repair", "auto_repair"),
  ("Auto Upgrade", "auto_upgrade"),
  ("Max Pods Per Node", "max_pods_per_node"),
  ("Local SSD Count", "local_ssd_count"),
  ("Min CPU Platform", "min_cpu_platform"),
  ("Reservation Affinity", "reservation_affinity"),
  ("Sandbox", "sandbox_type"),
)


def descriptor_summary(descriptor):
  """Display the configuration extracted from a source pool."""
  table = Table(title=f"Extracted Configuration: {descriptor.name}")
  table.add_column("Setting", style="bold")
  table.add_column("Value", style="green")

  for label, attr in _SUMMARY_FIELDS:
    value = getattr(descriptor, attr)
    table.add_row(label, "" if value is None else str(value))

  table.add_row("OAuth Scopes", ", ".join(descriptor.oauth_scopes))
  table.add_row("Autoscaling Enabled", str(descriptor.autoscaling_enabled))
  if descriptor.autoscaling_enabled:
    table.add_row("  Min Nodes", str(descriptor.autoscaling_min))
    table.add_row("  Max Nodes", str(descriptor.autoscaling_max))
  table.add_row("Node Locations", ", ".join(descriptor.node_locations))
  table.add_row("Node Labels", _format_map(descriptor.labels))
  table.add_row("Resource Labels", _format_map(descriptor.resource_labels))
  table.add_row("Taints", ", ".join(str(t) for t in descriptor.taints))

  console.print()
  console.print(table)


def mig_nodes_table(pool_name, nodes):
  """Display nodes of a MIG pool with their ``mig.config`` label."""
  console.print(f"\n[bold]MIG nodes in {pool_name}[/bold]")
  table = Table()
  table.add_column("Node", style="bold")
  table.add_column("MIG Config", style="green")
  for name, mig_config in nodes:
    table.add_row(name, mig_config or "[dim](unset)[/dim]")
  console.print(table)


def config_summary(config):
  """Display the resolved setup configuration."""
  table = Table(title="Configuration Summary")
  table.add_column("Setting", style="bold")
  table.add_column("Value", style="green")

  table.add_row("Project", config.project or "(gcloud default)")
  table.add_row("Region", config.region)
  table.add_row("Cluster", config.cluster)
  table.add_row("Mode", config.mode.value)
  table.add_row("Affinity Label Key", config.affinity_label_key)
  table.add_row("Output Directory", config.output_dir)

  console.print()
  console.print(table)


def _format_map(values):
  return ", ".join(f"{k}={v}" for k, v in values.items())
