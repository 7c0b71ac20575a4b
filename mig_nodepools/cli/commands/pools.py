"""mig-nodepools list command — show MIG-capable GPU node pools."""

import click

from mig_nodepools.backend import node_pools
from mig_nodepools.cli.options import cluster_options
from mig_nodepools.cli.output import (
  banner,
  console,
  gpu_pools_table,
  node_count_report,
  warning,
)
from mig_nodepools.cli.prerequisites_check import check_gcloud
from mig_nodepools.core.descriptor import from_node_pool, is_mig_capable


def load_pools(cluster, region, project):
  """Return ``(all_pools, gpu_pools)`` descriptors for the cluster.

  *gpu_pools* keeps only pools whose accelerator supports MIG.
  """
  try:
    raw_pools = node_pools.list_node_pools(cluster, region, project)
  except RuntimeError as e:
    raise click.ClickException(str(e))  # noqa: B904
  all_pools = [from_node_pool(p) for p in raw_pools]
  return all_pools, [d for d in all_pools if is_mig_capable(d)]


@click.command("list")
@cluster_options
def list_pools(cluster, region, project):
  """List MIG-capable GPU node pools in the cluster."""
  banner("mig-nodepools GPU Node Pools")

  check_gcloud()
  _, gpu_pools = load_pools(cluster, region, project)

  if not gpu_pools:
    warning(f"No MIG-capable GPU node pools found in cluster {cluster}")
    return

  gpu_pools_table(gpu_pools)
  console.print("Checking node counts in GPU node pools...")
  for descriptor in gpu_pools:
    node_count_report(descriptor)
  console.print()
