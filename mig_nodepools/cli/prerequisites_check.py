"""Prerequisite checks for the mig-nodepools CLI.

Delegates to :mod:`mig_nodepools.credentials` and converts ``RuntimeError``
into ``click.ClickException``.
"""

import click

from mig_nodepools import credentials


def check_gcloud():
  """Verify gcloud CLI is installed."""
  try:
    credentials.ensure_gcloud()
  except RuntimeError as e:
    raise click.ClickException(str(e))  # noqa: B904


def check_helm():
  """Verify helm is installed (needed for the DRA driver only)."""
  try:
    credentials.ensure_helm()
  except RuntimeError as e:
    raise click.ClickException(str(e))  # noqa: B904


def check_gke_auth_plugin():
  """Verify gke-gcloud-auth-plugin is installed; auto-install if missing."""
  try:
    credentials.ensure_gke_auth_plugin()
  except RuntimeError as e:
    raise click.ClickException(str(e))  # noqa: B904


def check_kubeconfig(cluster, region, project=None):
  """Point kubeconfig at the target cluster."""
  try:
    credentials.ensure_kubeconfig(cluster, region, project)
  except RuntimeError as e:
    raise click.ClickException(str(e))  # noqa: B904


def check_all(cluster, region, project=None):
  """Run all prerequisite checks needed to talk to the cluster."""
  check_gcloud()
  check_gke_auth_plugin()
  check_kubeconfig(cluster, region, project)
