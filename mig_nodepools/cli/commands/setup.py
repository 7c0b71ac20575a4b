"""mig-nodepools setup command — clone GPU pools into MIG-enabled pools."""

import os
import subprocess
from dataclasses import dataclass, field
from typing import Optional

import click

from mig_nodepools.backend import k8s_client, node_pools
from mig_nodepools.cli.commands.pools import load_pools
from mig_nodepools.cli.config import SetupConfig
from mig_nodepools.cli.options import cluster_options
from mig_nodepools.cli.output import (
  banner,
  config_summary,
  console,
  descriptor_summary,
  error,
  gpu_pools_table,
  mig_nodes_table,
  node_count_report,
  success,
  warning,
)
from mig_nodepools.cli.post_setup import install_dra_driver
from mig_nodepools.cli.prerequisites_check import check_all, check_helm
from mig_nodepools.cli.prompts import Confirm, make_confirm
from mig_nodepools.constants import (
  DEFAULT_AFFINITY_LABEL_KEY,
  DEFAULT_DRA_VALUES_FILE,
  DEFAULT_OUTPUT_DIR,
  DRA_API_GROUP,
  DRA_NAMESPACE,
  OUTPUT_DIR_ENV_VAR,
)
from mig_nodepools.core import mapper, resource_classes
from mig_nodepools.core.descriptor import SourcePoolDescriptor, from_node_pool

RESOURCE_CLASSES_FILE = "mig-device-classes.yaml"


@dataclass
class SetupReport:
  """What a setup run did, for the final summary."""

  created: list[str] = field(default_factory=list)
  skipped: list[str] = field(default_factory=list)
  failures: list[str] = field(default_factory=list)
  snapshots: list[str] = field(default_factory=list)


def migrate_pool(
  descriptor: SourcePoolDescriptor,
  config: SetupConfig,
  existing_names: set,
  confirm: Confirm,
  report: SetupReport,
):
  """Create the MIG-enabled pools for one source pool.

  Newly created names are added to *existing_names* so later sources whose
  truncated names collide are skipped.
  """
  name = descriptor.name
  console.print(f"\n[bold]=== Processing node pool: {name} ===[/bold]")

  if mapper.is_mig_pool(name):
    warning(f"Skipping {name} as it appears to be already MIG-enabled")
    report.skipped.append(name)
    return
  if descriptor.is_empty:
    warning(f"Skipping node pool '{name}' as it has 0 nodes")
    report.skipped.append(name)
    return

  # The source description is saved before anything is created from it.
  try:
    raw = node_pools.describe_node_pool(
      name, config.cluster, config.region, config.project
    )
    report.snapshots.append(
      node_pools.save_snapshot(
        raw, config.output_dir, node_pools.snapshot_filename("old", name)
      )
    )
  except RuntimeError as e:
    warning(str(e))
    report.failures.append(name)
    return
  descriptor = from_node_pool(raw)
  descriptor_summary(descriptor)

  for target in mapper.targets_for(config.mode):
    _create_target(descriptor, target, config, existing_names, confirm, report)

  console.print(f"[bold]=== Completed processing {name} ===[/bold]")


def _create_target(descriptor, target, config, existing_names, confirm, report):
  target_name = mapper.derive_target_name(descriptor.name, target.suffix)
  label = target.partition_size or "MIG-enabled"
  console.print(f"\n--- Creating {label} pool for {descriptor.name} ---")

  if mapper.should_skip(
    descriptor.name, existing_names, [target.suffix]
  ) or node_pools.node_pool_exists(
    target_name, config.cluster, config.region, config.project
  ):
    warning(f"Node pool {target_name} already exists. Skipping creation.")
    report.skipped.append(target_name)
    return

  spec = mapper.build_creation_parameters(
    descriptor, target, config.affinity_label_key
  )
  args = mapper.to_gcloud_args(
    spec, config.cluster, config.region, config.project
  )
  console.print(f"[dim]{' '.join(args)}[/dim]")
  if not confirm(f"Create node pool '{spec.name}' from '{descriptor.name}'?"):
    warning(f"Skipped creating {spec.name}")
    report.skipped.append(spec.name)
    return

  try:
    node_pools.create_node_pool(
      spec, config.cluster, config.region, config.project
    )
  except RuntimeError as e:
    error(str(e))
    report.failures.append(spec.name)
    return
  existing_names.add(spec.name)
  report.created.append(spec.name)
  success(f"New node pool {spec.name} created successfully")

  try:
    raw = node_pools.describe_node_pool(
      spec.name, config.cluster, config.region, config.project
    )
    report.snapshots.append(
      node_pools.save_snapshot(
        raw, config.output_dir, node_pools.snapshot_filename("new", spec.name)
      )
    )
  except RuntimeError as e:
    warning(f"Could not save description of {spec.name}: {e}")


def verify_mig_nodes(config: SetupConfig, pool_names):
  """Show the nodes of each new pool and their MIG configuration."""
  console.print("\n[bold]Verifying MIG configuration on nodes...[/bold]")
  for pool_name in pool_names:
    try:
      nodes = k8s_client.list_pool_nodes(config.affinity_label_key, pool_name)
    except RuntimeError as e:
      warning(f"Could not list nodes of {pool_name}: {e}")
      continue
    if nodes:
      mig_nodes_table(pool_name, nodes)
    else:
      warning(
        f"No MIG nodes found yet for {pool_name} "
        "(may take time for nodes to be ready)"
      )


def setup_dra(
  config: SetupConfig,
  install: Optional[bool],
  confirm: Confirm,
  report: SetupReport,
) -> Optional[str]:
  """Detect DRA support and optionally install the NVIDIA DRA driver.

  Returns:
      The served ``resource.k8s.io`` version, or None if DRA is unavailable.
  """
  console.print("\n[bold]Checking for DRA support in the cluster...[/bold]")
  try:
    api_version = k8s_client.dra_api_version()
  except RuntimeError as e:
    warning(str(e))
    report.failures.append("DRA discovery")
    return None

  if api_version is None:
    error("DRA (Dynamic Resource Allocation) is not supported in this cluster")
    warning("For GKE, enable the DRA feature in the cluster configuration")
    warning("Skipping DRA Driver installation")
    return None
  success(f"DRA support detected ({DRA_API_GROUP}/{api_version})")

  if install is None:
    install = confirm("Do you want to install the NVIDIA DRA Driver?")
  if not install:
    warning("Skipping DRA Driver installation")
    return api_version

  check_helm()
  console.print("Installing/Upgrading DRA Driver...")
  try:
    install_dra_driver(config.dra_values_file)
  except FileNotFoundError as e:
    raise click.ClickException(str(e))  # noqa: B904
  except subprocess.CalledProcessError as e:
    warning(f"DRA driver installation failed: {e}")
    report.failures.append("DRA driver installation")
    return api_version
  success("DRA Driver installed/upgraded successfully")

  try:
    pods = k8s_client.list_pods(DRA_NAMESPACE)
  except RuntimeError as e:
    warning(str(e))
    return api_version
  for pod_name, phase in pods:
    console.print(f"  {pod_name}: {phase}")
  return api_version


def declare_resource_classes(
  config: SetupConfig,
  api_version: Optional[str],
  apply: Optional[bool],
  confirm: Confirm,
  report: SetupReport,
):
  """Write the MIG device classes and optionally create them."""
  version = api_version or resource_classes.DEFAULT_API_VERSION
  path = os.path.join(config.output_dir, RESOURCE_CLASSES_FILE)
  try:
    os.makedirs(config.output_dir, exist_ok=True)
    with open(path, "w") as f:
      f.write(resource_classes.render_resource_classes(version))
  except OSError as e:
    warning(f"Could not write {path}: {e}")
    report.failures.append("Device class manifest")
  else:
    report.snapshots.append(path)

  if api_version is None:
    return
  if apply is None:
    apply = confirm("Declare the MIG device classes on the cluster?")
  if not apply:
    return

  try:
    results = k8s_client.apply_device_classes(api_version)
  except RuntimeError as e:
    warning(str(e))
    report.failures.append("Device class declaration")
    return
  for name, state in results:
    if state == "created":
      success(f"DeviceClass {name} created")
    else:
      console.print(f"DeviceClass {name} already exists")


def _print_summary(report: SetupReport):
  console.print()
  if report.failures:
    banner("Setup Completed With Warnings")
    console.print()
    warning(f"Failed steps: {', '.join(report.failures)}")
  else:
    banner("Setup Complete")

  console.print()
  if report.created:
    console.print(f"Created node pools: {', '.join(report.created)}")
  if report.skipped:
    console.print(f"Skipped: {', '.join(report.skipped)}")
  if report.snapshots:
    console.print("Files written:")
    for path in report.snapshots:
      console.print(f"  - {path}")

  console.print()
  warning("Next steps:")
  warning("1. Wait for new nodes to be ready")
  warning(
    "2. Verify MIG devices with: "
    "kubectl debug node/<NODE_NAME> -it --image=busybox"
  )
  warning("3. Run 'nvidia-smi -L' on the node to see MIG devices")
  warning("4. Test workloads using the new device classes")
  console.print()


@click.command()
@cluster_options
@click.option(
  "--mode",
  type=click.Choice([m.value for m in mapper.Mode]),
  default=mapper.Mode.PARTITIONED.value,
  show_default=True,
  help="single: one '-mig-enabled' pool per GPU pool; "
  "partitioned: one pool per MIG partition size",
)
@click.option(
  "--affinity-label-key",
  default=DEFAULT_AFFINITY_LABEL_KEY,
  show_default=True,
  help="Node label whose value is set to the new pool's name",
)
@click.option(
  "--output-dir",
  envvar=OUTPUT_DIR_ENV_VAR,
  default=DEFAULT_OUTPUT_DIR,
  type=click.Path(file_okay=False),
  help=f"Where node pool descriptions are saved [env: {OUTPUT_DIR_ENV_VAR}]",
)
@click.option(
  "--dra-values",
  default=DEFAULT_DRA_VALUES_FILE,
  show_default=True,
  help="Helm values file for the NVIDIA DRA driver",
)
@click.option(
  "--install-dra/--no-install-dra",
  default=None,
  help="Install the NVIDIA DRA driver [default: ask]",
)
@click.option(
  "--apply-resource-classes/--no-apply-resource-classes",
  default=None,
  help="Create the MIG device classes on the cluster [default: ask]",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts")
def setup(
  cluster,
  region,
  project,
  mode,
  affinity_label_key,
  output_dir,
  dra_values,
  install_dra,
  apply_resource_classes,
  yes,
):
  """Clone GPU node pools into MIG-enabled node pools."""
  banner("mig-nodepools Setup")

  check_all(cluster, region, project)

  config = SetupConfig(
    cluster=cluster,
    region=region,
    project=project,
    mode=mapper.Mode(mode),
    affinity_label_key=affinity_label_key,
    output_dir=output_dir,
    dra_values_file=dra_values,
  )
  config_summary(config)
  confirm = make_confirm(yes)

  all_pools, gpu_pools = load_pools(cluster, region, project)
  if not gpu_pools:
    raise click.ClickException(f"No GPU node pools found in cluster {cluster}")

  gpu_pools_table(gpu_pools)
  for descriptor in gpu_pools:
    node_count_report(descriptor)
  console.print(
    f"\nFound {len(gpu_pools)} GPU node pool(s): "
    f"{' '.join(d.name for d in gpu_pools)}"
  )

  report = SetupReport()
  existing_names = {d.name for d in all_pools}
  for descriptor in gpu_pools:
    migrate_pool(descriptor, config, existing_names, confirm, report)

  if report.created:
    verify_mig_nodes(config, report.created)

  api_version = setup_dra(config, install_dra, confirm, report)
  declare_resource_classes(
    config, api_version, apply_resource_classes, confirm, report
  )

  _print_summary(report)
