"""Maps an existing GPU node pool onto MIG-enabled replacement pools.

Single source of truth for how a source pool's configuration is carried over:
target naming, the already-MIG skip rule, and the typed creation parameters
that are serialised to ``gcloud container node-pools create`` argv only at
the very end (:func:`to_gcloud_args`).

Everything here is pure: no I/O, no prompts, no logging.
"""

import enum
from dataclasses import dataclass, field
from typing import Iterable, Optional

from mig_nodepools.constants import (
  DEFAULT_AFFINITY_LABEL_KEY,
  DEFAULT_OAUTH_SCOPES,
  GPU_TAINT,
  MAX_POOL_NAME_LENGTH,
  MIG_CONFIG_LABEL,
  MIG_CONFIG_VALUE,
  MIG_NAME_MARKERS,
  PARTITION_SIZES,
  SINGLE_POOL_SUFFIX,
  partition_suffix,
  region_flag,
)
from mig_nodepools.core.descriptor import SourcePoolDescriptor


class Mode(enum.Enum):
  """How a source pool is cloned."""

  SINGLE = "single"  # one "-mig-enabled" pool per source
  PARTITIONED = "partitioned"  # one pool per MIG partition size


@dataclass(frozen=True)
class MigTarget:
  """One pool to create from a source pool."""

  mode: Mode
  partition_size: Optional[str] = None  # "1g.5gb"; PARTITIONED only

  @property
  def suffix(self) -> str:
    if self.mode is Mode.PARTITIONED:
      return partition_suffix(self.partition_size)
    return SINGLE_POOL_SUFFIX


def targets_for(mode: Mode) -> list[MigTarget]:
  """Return the pools to create per source pool, in creation order."""
  if mode is Mode.PARTITIONED:
    return [MigTarget(mode, size) for size in PARTITION_SIZES]
  return [MigTarget(mode)]


@dataclass(frozen=True)
class AcceleratorParams:
  type: str
  count: int
  partition_size: Optional[str] = None
  driver_version: Optional[str] = None  # "default", "latest", "disabled"

  def flag_value(self) -> str:
    """Render the ``--accelerator`` value: ``type=...,count=...[,...]``."""
    parts = [f"type={self.type}", f"count={self.count}"]
    if self.partition_size:
      parts.append(f"gpu-partition-size={self.partition_size}")
    if self.driver_version:
      parts.append(f"gpu-driver-version={self.driver_version}")
    return ",".join(parts)


@dataclass
class CreationParameters:
  """Arguments of a node pool create call, already in gcloud's vocabulary."""

  accelerator: AcceleratorParams
  node_labels: dict[str, str]
  node_taints: list[str]
  scopes: list[str]
  num_nodes: int
  machine_type: Optional[str] = None
  image_type: Optional[str] = None
  disk_type: Optional[str] = None
  disk_size_gb: Optional[int] = None
  service_account: Optional[str] = None
  enable_autoscaling: bool = False
  min_nodes: Optional[int] = None
  max_nodes: Optional[int] = None
  enable_autorepair: bool = False
  enable_autoupgrade: bool = False
  max_pods_per_node: Optional[int] = None
  node_locations: list[str] = field(default_factory=list)
  spot: bool = False
  preemptible: bool = False
  local_ssd_count: Optional[int] = None
  min_cpu_platform: Optional[str] = None
  boot_disk_kms_key: Optional[str] = None
  # MIG needs the NVIDIA driver to load unsigned modules.
  shielded_integrity_monitoring: bool = True
  shielded_secure_boot: bool = False
  reservation_affinity: Optional[str] = None  # "any", "none", "specific"
  sandbox_type: Optional[str] = None  # "gvisor"
  resource_labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TargetPoolSpec:
  """A derived pool name plus everything needed to create it."""

  name: str
  source_name: str
  target: MigTarget
  params: CreationParameters


# ── Naming ────────────────────────────────────────────────────────


def derive_target_name(
  source_name: str, suffix: str, max_length: int = MAX_POOL_NAME_LENGTH
) -> str:
  """Append *suffix* to *source_name*, trimming the source to fit.

  The suffix is always kept intact; when the combined name is too long the
  tail of *source_name* is dropped so the result is exactly *max_length*
  characters. Distinct sources sharing a long prefix can therefore map to
  the same name.
  """
  candidate = source_name + suffix
  if len(candidate) <= max_length:
    return candidate
  keep = max(max_length - len(suffix), 0)
  return (source_name[:keep] + suffix)[-max_length:]


def is_mig_pool(name: str, markers: Iterable[str] = MIG_NAME_MARKERS) -> bool:
  """True if *name* looks like a pool created by this tool."""
  return any(marker in name for marker in markers)


def should_skip(
  source_name: str,
  existing_names: Iterable[str],
  suffixes: Iterable[str],
  markers: Iterable[str] = MIG_NAME_MARKERS,
) -> bool:
  """Decide whether *source_name* must not be cloned (again).

  Returns True if the name carries an already-MIG marker, or if any name
  derived from it with *suffixes* is already taken.
  """
  if is_mig_pool(source_name, markers):
    return True
  existing = set(existing_names)
  return any(
    derive_target_name(source_name, suffix) in existing for suffix in suffixes
  )


# ── Field mapping ─────────────────────────────────────────────────

_DRIVER_VERSIONS = {
  "installation_disabled": "disabled",
  "default": "default",
  "latest": "latest",
}

_RESERVATION_AFFINITIES = {
  "ANY_RESERVATION": "any",
  "NO_RESERVATION": "none",
  "SPECIFIC_RESERVATION": "specific",
}


def map_driver_version(raw: Optional[str]) -> Optional[str]:
  """Map a GKE ``gpuDriverVersion`` enum to a gcloud flag value.

  Unset stays unset; unknown values fall back to ``default``.
  """
  if not raw or raw == "null":
    return None
  return _DRIVER_VERSIONS.get(raw.lower(), "default")


def merge_labels(
  labels: dict[str, str],
  target_name: str,
  affinity_label_key: str = DEFAULT_AFFINITY_LABEL_KEY,
) -> dict[str, str]:
  """Source node labels plus the MIG config and affinity labels."""
  return {
    **labels,
    MIG_CONFIG_LABEL: MIG_CONFIG_VALUE,
    affinity_label_key: target_name,
  }


def merge_taints(taints: Iterable) -> list[str]:
  """Source taints plus the GPU taint, unless that exact taint is present."""
  merged = [str(t) for t in taints]
  if GPU_TAINT not in merged:
    merged.append(GPU_TAINT)
  return merged


def _map_reservation_affinity(raw: Optional[str]) -> Optional[str]:
  if not raw or raw == "UNSPECIFIED":
    return None
  return _RESERVATION_AFFINITIES.get(raw, raw.lower())


def build_creation_parameters(
  descriptor: SourcePoolDescriptor,
  target: MigTarget,
  affinity_label_key: str = DEFAULT_AFFINITY_LABEL_KEY,
) -> TargetPoolSpec:
  """Carry *descriptor* over to a MIG-enabled pool described by *target*.

  Every field the source sets is copied; unset fields are omitted. Never
  raises on missing input.
  """
  name = derive_target_name(descriptor.name, target.suffix)

  if target.mode is Mode.PARTITIONED:
    accelerator = AcceleratorParams(
      type=descriptor.accelerator_type or "",
      count=descriptor.accelerator_count or 0,
      partition_size=target.partition_size,
      driver_version=map_driver_version(descriptor.gpu_driver_version),
    )
  else:
    accelerator = AcceleratorParams(
      type=descriptor.accelerator_type or "",
      count=descriptor.accelerator_count or 0,
    )

  params = CreationParameters(
    accelerator=accelerator,
    node_labels=merge_labels(descriptor.labels, name, affinity_label_key),
    node_taints=merge_taints(descriptor.taints),
    scopes=list(descriptor.oauth_scopes or DEFAULT_OAUTH_SCOPES),
    num_nodes=descriptor.node_count,
    machine_type=descriptor.machine_type,
    image_type=descriptor.image_type,
    disk_type=descriptor.disk_type,
    disk_size_gb=descriptor.disk_size_gb,
    service_account=descriptor.service_account,
    enable_autorepair=descriptor.auto_repair,
    enable_autoupgrade=descriptor.auto_upgrade,
    max_pods_per_node=descriptor.max_pods_per_node,
    node_locations=list(descriptor.node_locations),
    spot=descriptor.spot,
    preemptible=descriptor.preemptible and not descriptor.spot,
    local_ssd_count=descriptor.local_ssd_count or None,
    min_cpu_platform=descriptor.min_cpu_platform,
    boot_disk_kms_key=descriptor.boot_disk_kms_key,
    reservation_affinity=_map_reservation_affinity(
      descriptor.reservation_affinity
    ),
    sandbox_type=(descriptor.sandbox_type or "").lower() or None,
    resource_labels=dict(descriptor.resource_labels),
  )
  _apply_autoscaling(params, descriptor, target.mode)

  return TargetPoolSpec(
    name=name, source_name=descriptor.name, target=target, params=params
  )


def _apply_autoscaling(params, descriptor, mode):
  if mode is Mode.PARTITIONED:
    # New partition pools start empty and scale up on demand.
    params.enable_autoscaling = True
    params.num_nodes = 0
    if descriptor.autoscaling_enabled:
      params.min_nodes = _first_set(descriptor.autoscaling_min, 1)
      params.max_nodes = _first_set(
        descriptor.autoscaling_max, descriptor.node_count
      )
    else:
      params.min_nodes = 1
      params.max_nodes = descriptor.node_count
    return

  if descriptor.autoscaling_enabled:
    params.enable_autoscaling = True
    params.min_nodes = descriptor.autoscaling_min
    params.max_nodes = descriptor.autoscaling_max


def _first_set(value, fallback):
  return fallback if value is None else value


# ── Serialisation ─────────────────────────────────────────────────


def to_gcloud_args(
  spec: TargetPoolSpec,
  cluster: str,
  location: str,
  project: Optional[str] = None,
) -> list[str]:
  """Render *spec* as ``gcloud container node-pools create`` argv."""
  p = spec.params
  args = [
    "gcloud",
    "container",
    "node-pools",
    "create",
    spec.name,
    f"--cluster={cluster}",
    region_flag(location),
  ]
  if project:
    args.append(f"--project={project}")

  optional_values = [
    ("--machine-type", p.machine_type),
    ("--image-type", p.image_type),
    ("--disk-type", p.disk_type),
    ("--disk-size", p.disk_size_gb),
    ("--service-account", p.service_account),
  ]
  args.extend(f"{flag}={value}" for flag, value in optional_values if value)

  args.append(f"--accelerator={p.accelerator.flag_value()}")
  args.append(f"--node-labels={_join_map(p.node_labels)}")
  args.append(f"--node-taints={','.join(p.node_taints)}")
  args.append(f"--scopes={','.join(p.scopes)}")

  if p.enable_autoscaling:
    args.append("--enable-autoscaling")
    if p.min_nodes is not None:
      args.append(f"--min-nodes={p.min_nodes}")
    if p.max_nodes is not None:
      args.append(f"--max-nodes={p.max_nodes}")
  args.append(f"--num-nodes={p.num_nodes}")

  if p.enable_autorepair:
    args.append("--enable-autorepair")
  if p.enable_autoupgrade:
    args.append("--enable-autoupgrade")
  if p.max_pods_per_node:
    args.append(f"--max-pods-per-node={p.max_pods_per_node}")
  if p.node_locations:
    args.append(f"--node-locations={','.join(p.node_locations)}")
  if p.spot:
    args.append("--spot")
  elif p.preemptible:
    args.append("--preemptible")
  if p.local_ssd_count:
    args.append(f"--local-ssd-count={p.local_ssd_count}")
  if p.min_cpu_platform:
    args.append(f"--min-cpu-platform={p.min_cpu_platform}")
  if p.boot_disk_kms_key:
    args.append(f"--boot-disk-kms-key={p.boot_disk_kms_key}")

  args.append(
    "--shielded-integrity-monitoring"
    if p.shielded_integrity_monitoring
    else "--no-shielded-integrity-monitoring"
  )
  args.append(
    "--shielded-secure-boot"
    if p.shielded_secure_boot
    else "--no-shielded-secure-boot"
  )

  if p.reservation_affinity:
    args.append(f"--reservation-affinity={p.reservation_affinity}")
  if p.sandbox_type:
    args.append(f"--sandbox=type={p.sandbox_type}")
  if p.resource_labels:
    args.append(f"--labels={_join_map(p.resource_labels)}")
  return args


def _join_map(values: dict[str, str]) -> str:
  return ",".join(f"{k}={v}" for k, v in values.items())
