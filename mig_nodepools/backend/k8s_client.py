"""Kubernetes API calls: DRA discovery, MIG node checks, device classes."""

from typing import Optional

from absl import logging
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from mig_nodepools.constants import DRA_API_GROUP, MIG_CONFIG_LABEL
from mig_nodepools.core import resource_classes


def dra_api_version() -> Optional[str]:
  """Return the preferred ``resource.k8s.io`` version, or None if absent.

  A cluster serving this API group supports Dynamic Resource Allocation.
  """
  _load_kube_config()
  try:
    groups = client.ApisApi().get_api_versions().groups or []
  except ApiException as e:
    raise RuntimeError(
      f"Failed to discover cluster API groups: {e.status} - {e.reason}"
    ) from e
  for group in groups:
    if group.name == DRA_API_GROUP:
      return group.preferred_version.version
  return None


def list_pool_nodes(label_key, pool_name):
  """List nodes carrying ``label_key=pool_name``.

  Returns:
      list of ``(node_name, mig_config)`` tuples; *mig_config* is the value
      of the ``nvidia.com/mig.config`` label or ``""``.
  """
  _load_kube_config()
  core_v1 = client.CoreV1Api()
  try:
    nodes = core_v1.list_node(label_selector=f"{label_key}={pool_name}")
  except ApiException as e:
    raise RuntimeError(f"Failed to list nodes: {e.reason}") from e
  return [
    (
      node.metadata.name,
      (node.metadata.labels or {}).get(MIG_CONFIG_LABEL, ""),
    )
    for node in nodes.items
  ]


def list_pods(namespace):
  """List ``(pod_name, phase)`` tuples in *namespace*."""
  _load_kube_config()
  core_v1 = client.CoreV1Api()
  try:
    pods = core_v1.list_namespaced_pod(namespace)
  except ApiException as e:
    if e.status == 404:
      return []
    raise RuntimeError(
      f"Failed to list pods in namespace '{namespace}': {e.reason}"
    ) from e
  return [(pod.metadata.name, pod.status.phase) for pod in pods.items]


def apply_device_classes(api_version):
  """Create the MIG device classes on the cluster.

  Existing classes are left untouched.

  Returns:
      list of ``(class_name, "created" | "exists")`` tuples.

  Raises:
      RuntimeError: On any API error other than 409 Conflict.
  """
  _load_kube_config()
  custom = client.CustomObjectsApi()
  results = []
  for body in resource_classes.device_classes(api_version):
    name = body["metadata"]["name"]
    try:
      custom.create_cluster_custom_object(
        group=DRA_API_GROUP,
        version=api_version,
        plural="deviceclasses",
        body=body,
      )
      logging.info("Created DeviceClass %s", name)
      results.append((name, "created"))
    except ApiException as e:
      if e.status == 409:
        logging.info("DeviceClass %s already exists", name)
        results.append((name, "exists"))
      elif e.status == 403:
        raise RuntimeError(
          "Permission denied creating DeviceClass objects. Ensure your "
          "kubeconfig has 'create' permission on deviceclasses. "
          "Run: kubectl auth can-i create deviceclasses"
        ) from e
      elif e.status == 404:
        raise RuntimeError(
          f"{DRA_API_GROUP}/{api_version} deviceclasses not served by "
          "this cluster. Enable DRA on the cluster first."
        ) from e
      else:
        raise RuntimeError(
          f"Kubernetes API error: {e.status} - {e.reason}: {e.body}"
        ) from e
  return results


def _load_kube_config():
  """Load Kubernetes configuration.

  Attempts to load config in order:
  1. In-cluster config (if running inside K8s)
  2. Kubeconfig from KUBECONFIG env or ~/.kube/config

  Raises:
      RuntimeError: If unable to load any configuration
  """
  try:
    config.load_incluster_config()
    return
  except config.ConfigException:
    pass

  try:
    config.load_kube_config()
  except config.ConfigException as e:
    raise RuntimeError(
      "Failed to load Kubernetes configuration. "
      "Ensure you have run 'gcloud container clusters get-credentials "
      "<cluster-name>' or have a valid kubeconfig. "
      f"Error: {e}"
    ) from e
