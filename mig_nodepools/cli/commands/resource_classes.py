"""mig-nodepools resource-classes command — print or declare device classes."""

import click

from mig_nodepools.backend import k8s_client
from mig_nodepools.cli.options import cluster_options
from mig_nodepools.cli.output import console, success
from mig_nodepools.cli.prerequisites_check import check_all
from mig_nodepools.constants import CLUSTER_ENV_VAR, REGION_ENV_VAR
from mig_nodepools.core import resource_classes


@click.command("resource-classes")
@cluster_options(required=False)
@click.option(
  "--output",
  "-o",
  type=click.File("w"),
  default="-",
  show_default=True,
  help="Write the device class manifests to this file",
)
@click.option(
  "--api-version",
  default=None,
  help="resource.k8s.io version [default: cluster's preferred version "
  f"with --apply, else {resource_classes.DEFAULT_API_VERSION}]",
)
@click.option(
  "--apply", is_flag=True, help="Create the device classes on the cluster"
)
def resource_classes_cmd(cluster, region, project, output, api_version, apply):
  """Render the MIG device classes and optionally declare them."""
  if apply:
    if not cluster or not region:
      raise click.UsageError(
        "--cluster and --region are required with --apply "
        f"[env: {CLUSTER_ENV_VAR}, {REGION_ENV_VAR}]"
      )
    check_all(cluster, region, project)
    try:
      served = k8s_client.dra_api_version()
    except RuntimeError as e:
      raise click.ClickException(str(e))  # noqa: B904
    if served is None:
      raise click.ClickException(
        "DRA (Dynamic Resource Allocation) is not supported in this cluster."
      )
    api_version = api_version or served

  version = api_version or resource_classes.DEFAULT_API_VERSION
  output.write(resource_classes.render_resource_classes(version))

  if not apply:
    return

  try:
    results = k8s_client.apply_device_classes(version)
  except RuntimeError as e:
    raise click.ClickException(str(e))  # noqa: B904
  for name, state in results:
    if state == "created":
      success(f"DeviceClass {name} created")
    else:
      console.print(f"DeviceClass {name} already exists")
