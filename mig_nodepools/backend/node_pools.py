"""GKE node pool operations through the ``gcloud`` CLI.

All functions raise ``RuntimeError`` on command failure; callers in the CLI
layer decide whether a failure is fatal or skipped.
"""

import json
import os
import subprocess
from typing import Optional

import yaml
from absl import logging

from mig_nodepools.constants import region_flag
from mig_nodepools.core import mapper


def _parse_json(text, what):
  try:
    return json.loads(text)
  except json.JSONDecodeError as e:
    raise RuntimeError(
      f"Could not parse gcloud output for {what}: {e}"
    ) from e


def _base_args(verb, cluster, location, project, name=None):
  args = ["gcloud", "container", "node-pools", verb]
  if name:
    args.append(name)
  args += [
    f"--cluster={cluster}",
    region_flag(location),
  ]
  if project:
    args.append(f"--project={project}")
  return args


def list_node_pools(
  cluster: str, location: str, project: Optional[str] = None
) -> list[dict]:
  """Return every node pool of *cluster* as NodePool JSON dicts."""
  args = _base_args("list", cluster, location, project) + ["--format=json"]
  result = subprocess.run(args, capture_output=True, text=True)
  if result.returncode != 0:
    raise RuntimeError(
      f"Failed to list node pools of cluster '{cluster}' in '{location}': "
      f"{result.stderr.strip()}"
    )
  if not result.stdout.strip():
    return []
  return _parse_json(result.stdout, f"node pool list of cluster '{cluster}'")


def describe_node_pool(
  name: str, cluster: str, location: str, project: Optional[str] = None
) -> dict:
  """Return the NodePool JSON dict for *name*."""
  args = _base_args("describe", cluster, location, project, name)
  args.append("--format=json")
  result = subprocess.run(args, capture_output=True, text=True)
  if result.returncode != 0:
    raise RuntimeError(
      f"Failed to describe node pool '{name}': {result.stderr.strip()}"
    )
  return _parse_json(result.stdout, f"node pool '{name}'")


def node_pool_exists(
  name: str, cluster: str, location: str, project: Optional[str] = None
) -> bool:
  """Check if a node pool named *name* exists in *cluster*."""
  args = _base_args("describe", cluster, location, project, name)
  args.append("--quiet")
  result = subprocess.run(args, capture_output=True)
  return result.returncode == 0


def create_node_pool(
  spec: mapper.TargetPoolSpec,
  cluster: str,
  location: str,
  project: Optional[str] = None,
) -> None:
  """Create the node pool described by *spec*; blocks until GKE is done."""
  args = mapper.to_gcloud_args(spec, cluster, location, project)
  logging.info("Executing: %s", " ".join(args))
  try:
    subprocess.run(args, check=True, capture_output=True, text=True)
  except subprocess.CalledProcessError as e:
    raise RuntimeError(
      f"Failed to create node pool '{spec.name}': {(e.stderr or '').strip()}"
    ) from e
  logging.info("Node pool '%s' created.", spec.name)


def save_snapshot(pool: dict, output_dir: str, filename: str) -> str:
  """Write a NodePool description as YAML and return the file path.

  Raises:
      RuntimeError: If the file cannot be written.
  """
  path = os.path.join(output_dir, filename)
  try:
    os.makedirs(output_dir, exist_ok=True)
    with open(path, "w") as f:
      yaml.safe_dump(pool, f, sort_keys=False)
  except OSError as e:
    raise RuntimeError(f"Failed to save {path}: {e}") from e
  logging.info("Saved node pool description to %s", path)
  return path


def snapshot_filename(kind: str, pool_name: str) -> str:
  """File name for a saved description ('old' or 'new')."""
  return f"{kind}-nodepool-{pool_name}.yaml"
