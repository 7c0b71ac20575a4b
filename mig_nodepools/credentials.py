"""Local tool and kubeconfig checks run before touching the cluster.

Failures raise ``RuntimeError``; the CLI reports them as click errors.
"""

import os
import shutil
import subprocess
from typing import Optional

from absl import logging
from kubernetes import config

from mig_nodepools.constants import region_flag


def ensure_gcloud() -> None:
  """Verify gcloud CLI is installed."""
  if not shutil.which("gcloud"):
    raise RuntimeError(
      "gcloud CLI not found. "
      "Install from: https://cloud.google.com/sdk/docs/install"
    )


def ensure_helm() -> None:
  """Verify helm is installed."""
  if not shutil.which("helm"):
    raise RuntimeError(
      "helm not found. Install from: https://helm.sh/docs/intro/install/"
    )


def ensure_gke_auth_plugin() -> None:
  """Verify gke-gcloud-auth-plugin is installed; auto-install if missing."""
  if shutil.which("gke-gcloud-auth-plugin"):
    return

  logging.info("gke-gcloud-auth-plugin not found. Installing...")
  try:
    subprocess.run(
      [
        "gcloud",
        "components",
        "install",
        "gke-gcloud-auth-plugin",
        "--quiet",
      ],
      check=True,
      capture_output=True,
    )
    logging.info("gke-gcloud-auth-plugin installed successfully.")
  except subprocess.CalledProcessError as e:
    raise RuntimeError(
      "Failed to install gke-gcloud-auth-plugin. "
      "Install manually: gcloud components install gke-gcloud-auth-plugin"
    ) from e


def ensure_kubeconfig(
  cluster: str, location: str, project: Optional[str] = None
) -> None:
  """Ensure the active kubeconfig context points at *cluster*.

  GKE contexts are named ``gke_{project}_{location}_{cluster}``. When
  *project* is ``None`` only the location and cluster parts are compared.
  If the context is wrong or kubeconfig is missing, runs ``gcloud container
  clusters get-credentials`` to configure it.
  """
  try:
    config.load_kube_config()
    _, active_context = config.list_kube_config_contexts()
    if active_context:
      active_cluster = active_context.get("context", {}).get("cluster", "")
      if _context_matches(active_cluster, cluster, location, project):
        return
      logging.info(
        "Active kubeconfig context '%s' does not match cluster '%s'. "
        "Reconfiguring...",
        active_cluster,
        cluster,
      )
  except config.ConfigException:
    logging.info("No valid kubeconfig found. Configuring...")

  _configure_kubeconfig(cluster, location, project)


def _context_matches(active_cluster, cluster, location, project):
  if project:
    return active_cluster == f"gke_{project}_{location}_{cluster}"
  return active_cluster.startswith("gke_") and active_cluster.endswith(
    f"_{location}_{cluster}"
  )


def _configure_kubeconfig(
  cluster: str, location: str, project: Optional[str]
) -> None:
  """Run ``gcloud container clusters get-credentials``."""
  env = {**os.environ, "USE_GKE_GCLOUD_AUTH_PLUGIN": "True"}
  args = [
    "gcloud",
    "container",
    "clusters",
    "get-credentials",
    cluster,
    region_flag(location),
  ]
  if project:
    args.append(f"--project={project}")
  try:
    subprocess.run(args, check=True, env=env, capture_output=True)
    logging.info("Kubeconfig configured for cluster '%s'.", cluster)
  except subprocess.CalledProcessError as e:
    raise RuntimeError(
      f"Failed to configure kubeconfig for cluster '{cluster}' "
      f"in '{location}'. Ensure the cluster exists and you have access. "
      f"Run manually: {' '.join(args)}"
    ) from e
