"""mig-nodepools CLI entry point."""

import click

from mig_nodepools.cli.commands.config import config
from mig_nodepools.cli.commands.pools import list_pools
from mig_nodepools.cli.commands.resource_classes import resource_classes_cmd
from mig_nodepools.cli.commands.setup import setup


@click.group()
@click.version_option(package_name="gke-mig-nodepools")
def cli():
  """mig-nodepools: Clone GKE GPU node pools into MIG-enabled node pools."""


cli.add_command(setup)
cli.add_command(list_pools)
cli.add_command(resource_classes_cmd)
cli.add_command(config)
