"""Post-setup steps run once the MIG pools exist.

These apply cluster-wide add-ons through ``helm`` and therefore depend on
kubeconfig already pointing at the cluster.
"""

import os
import subprocess

from mig_nodepools.constants import (
  DRA_HELM_CHART,
  DRA_HELM_CHART_VERSION,
  DRA_HELM_RELEASE,
  DRA_HELM_REPO_NAME,
  DRA_HELM_REPO_URL,
  DRA_NAMESPACE,
)


def install_dra_driver(values_file):
  """Install or upgrade the NVIDIA DRA driver for GPUs.

  Registers the NVIDIA Helm repository, then upgrades (or installs) the
  driver release in its own namespace.

  Args:
      values_file: Helm values file with the GKE-specific driver settings.

  Raises:
      FileNotFoundError: If *values_file* does not exist.
      subprocess.CalledProcessError: If helm fails.
  """
  if not os.path.isfile(values_file):
    raise FileNotFoundError(
      f"{values_file} configuration file not found. "
      "Provide the DRA driver values file with --dra-values."
    )
  subprocess.run(
    ["helm", "repo", "add", DRA_HELM_REPO_NAME, DRA_HELM_REPO_URL],
    check=True,
  )
  subprocess.run(["helm", "repo", "update"], check=True)
  subprocess.run(
    [
      "helm",
      "-n",
      DRA_NAMESPACE,
      "upgrade",
      "-i",
      DRA_HELM_RELEASE,
      DRA_HELM_CHART,
      "--create-namespace",
      "-f",
      values_file,
      f"--version={DRA_HELM_CHART_VERSION}",
    ],
    check=True,
  )
