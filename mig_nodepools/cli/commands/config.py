"""mig-nodepools config command — show effective configuration."""

import os

import click
from rich.table import Table

from mig_nodepools.cli.output import banner, console
from mig_nodepools.constants import (
  CLUSTER_ENV_VAR,
  OUTPUT_DIR_ENV_VAR,
  PROJECT_ENV_VAR,
  REGION_ENV_VAR,
)


@click.group(invoke_without_command=True)
@click.pass_context
def config(ctx):
  """Show mig-nodepools configuration."""
  if ctx.invoked_subcommand is None:
    ctx.invoke(show)


@config.command()
def show():
  """Show current configuration."""
  banner("mig-nodepools Configuration")

  table = Table()
  table.add_column("Setting", style="bold")
  table.add_column("Value", style="green")
  table.add_column("Source", style="dim")

  settings = [
    ("Project", PROJECT_ENV_VAR, "(gcloud default)"),
    ("Region", REGION_ENV_VAR, "(not set)"),
    ("Cluster", CLUSTER_ENV_VAR, "(not set)"),
    ("Output Directory", OUTPUT_DIR_ENV_VAR, "."),
  ]
  for label, env_var, fallback in settings:
    value = os.environ.get(env_var)
    table.add_row(
      label,
      value or fallback,
      env_var if value else "default",
    )

  console.print()
  console.print(table)
  console.print()
  console.print("Set values via environment variables:")
  console.print(f"  export {PROJECT_ENV_VAR}=my-project")
  console.print(f"  export {REGION_ENV_VAR}=us-central1")
  console.print(f"  export {CLUSTER_ENV_VAR}=my-gpu-cluster")
  console.print()
