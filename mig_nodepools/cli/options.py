"""Click options shared by every command that targets a cluster."""

import functools

import click

from mig_nodepools.constants import (
  CLUSTER_ENV_VAR,
  PROJECT_ENV_VAR,
  REGION_ENV_VAR,
)


def cluster_options(f=None, *, required=True):
  """Add ``--project``, ``--region`` and ``--cluster`` to a command.

  Use ``@cluster_options(required=False)`` for commands that only need the
  cluster for some of their flags; they must validate the values themselves.
  """
  if f is None:
    return functools.partial(cluster_options, required=required)
  f = click.option(
    "--project",
    envvar=PROJECT_ENV_VAR,
    default=None,
    help=f"GCP project ID [env: {PROJECT_ENV_VAR}, default: gcloud config]",
  )(f)
  f = click.option(
    "--region",
    envvar=REGION_ENV_VAR,
    required=required,
    help=f"Cluster region or zone, e.g. us-central1 [env: {REGION_ENV_VAR}]",
  )(f)
  f = click.option(
    "--cluster",
    envvar=CLUSTER_ENV_VAR,
    required=required,
    help=f"GKE cluster name [env: {CLUSTER_ENV_VAR}]",
  )(f)
  return f
