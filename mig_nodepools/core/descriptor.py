"""Typed view of a GKE node pool as reported by ``gcloud ... describe``.

Every field is optional: ``None`` (or an empty container) means the source
pool does not set it. Parsing never fails on missing keys.
"""

from dataclasses import dataclass, field
from typing import Optional

from mig_nodepools.constants import MIG_CAPABLE_ACCELERATORS

_TAINT_EFFECTS = {
  "NO_SCHEDULE": "NoSchedule",
  "PREFER_NO_SCHEDULE": "PreferNoSchedule",
  "NO_EXECUTE": "NoExecute",
}


@dataclass(frozen=True)
class Taint:
  """A node taint in kubectl notation."""

  key: str
  value: str = ""
  effect: str = ""  # "NoSchedule", "PreferNoSchedule", "NoExecute"

  def __str__(self):
    if self.value:
      return f"{self.key}={self.value}:{self.effect}"
    return f"{self.key}:{self.effect}"


@dataclass(frozen=True)
class SourcePoolDescriptor:
  """Configuration of an existing node pool."""

  name: str
  status: Optional[str] = None
  machine_type: Optional[str] = None
  image_type: Optional[str] = None
  disk_type: Optional[str] = None
  disk_size_gb: Optional[int] = None
  service_account: Optional[str] = None
  initial_node_count: Optional[int] = None
  accelerator_type: Optional[str] = None  # "nvidia-tesla-a100"
  accelerator_count: Optional[int] = None
  gpu_driver_version: Optional[str] = None  # raw, e.g. "LATEST"
  oauth_scopes: tuple[str, ...] = ()
  autoscaling_enabled: bool = False
  autoscaling_min: Optional[int] = None
  autoscaling_max: Optional[int] = None
  auto_repair: bool = False
  auto_upgrade: bool = False
  max_pods_per_node: Optional[int] = None
  node_locations: tuple[str, ...] = ()
  spot: bool = False
  preemptible: bool = False
  local_ssd_count: Optional[int] = None
  boot_disk_kms_key: Optional[str] = None
  shielded_integrity_monitoring: bool = False
  shielded_secure_boot: bool = False
  labels: dict[str, str] = field(default_factory=dict)
  resource_labels: dict[str, str] = field(default_factory=dict)
  taints: tuple[Taint, ...] = ()
  min_cpu_platform: Optional[str] = None
  reservation_affinity: Optional[str] = None  # "ANY_RESERVATION"
  sandbox_type: Optional[str] = None  # "GVISOR"

  @property
  def node_count(self) -> int:
    """Node count to carry over; an unset count means one node."""
    if self.initial_node_count is None:
      return 1
    return self.initial_node_count

  @property
  def is_empty(self) -> bool:
    """True if the pool reports no nodes (an unset count counts as zero)."""
    return not self.initial_node_count


def from_node_pool(pool: dict) -> SourcePoolDescriptor:
  """Build a descriptor from a NodePool resource in its JSON form.

  Args:
      pool: dict decoded from ``gcloud container node-pools describe
          --format=json`` (or one entry of ``list --format=json``).
  """
  config = pool.get("config") or {}
  accelerators = config.get("accelerators") or []
  accel = accelerators[0] if accelerators else {}
  autoscaling = pool.get("autoscaling") or {}
  management = pool.get("management") or {}
  shielded = config.get("shieldedInstanceConfig") or {}
  driver_config = accel.get("gpuDriverInstallationConfig") or {}

  autoscaling_enabled = bool(autoscaling.get("enabled"))
  autoscaling_min = _to_int(autoscaling.get("minNodeCount"))
  # Zero-valued ints are omitted from the JSON.
  if autoscaling_enabled and autoscaling_min is None:
    autoscaling_min = 0

  return SourcePoolDescriptor(
    name=pool.get("name", ""),
    status=pool.get("status"),
    machine_type=config.get("machineType"),
    image_type=config.get("imageType"),
    disk_type=config.get("diskType"),
    disk_size_gb=_to_int(config.get("diskSizeGb")),
    service_account=config.get("serviceAccount"),
    initial_node_count=_to_int(pool.get("initialNodeCount")),
    accelerator_type=accel.get("acceleratorType"),
    accelerator_count=_to_int(accel.get("acceleratorCount")),
    gpu_driver_version=driver_config.get("gpuDriverVersion"),
    oauth_scopes=tuple(config.get("oauthScopes") or ()),
    autoscaling_enabled=autoscaling_enabled,
    autoscaling_min=autoscaling_min,
    autoscaling_max=_to_int(autoscaling.get("maxNodeCount")),
    auto_repair=bool(management.get("autoRepair")),
    auto_upgrade=bool(management.get("autoUpgrade")),
    max_pods_per_node=_to_int(
      (pool.get("maxPodsConstraint") or {}).get("maxPodsPerNode")
    ),
    node_locations=tuple(pool.get("locations") or ()),
    spot=bool(config.get("spot")),
    preemptible=bool(config.get("preemptible")),
    local_ssd_count=_to_int(config.get("localSsdCount")),
    boot_disk_kms_key=config.get("bootDiskKmsKey"),
    shielded_integrity_monitoring=bool(
      shielded.get("enableIntegrityMonitoring")
    ),
    shielded_secure_boot=bool(shielded.get("enableSecureBoot")),
    labels=dict(config.get("labels") or {}),
    resource_labels=dict(
      config.get("resourceLabels") or pool.get("resourceLabels") or {}
    ),
    taints=tuple(
      _parse_taint(t) for t in config.get("taints") or () if t.get("key")
    ),
    min_cpu_platform=config.get("minCpuPlatform"),
    reservation_affinity=(config.get("reservationAffinity") or {}).get(
      "consumeReservationType"
    ),
    sandbox_type=(config.get("sandboxConfig") or {}).get("type"),
  )


def is_mig_capable(descriptor: SourcePoolDescriptor) -> bool:
  """True if the pool's accelerator supports MIG partitioning."""
  accel = descriptor.accelerator_type or ""
  return any(t in accel for t in MIG_CAPABLE_ACCELERATORS)


def _parse_taint(raw: dict) -> Taint:
  effect = raw.get("effect", "")
  return Taint(
    key=raw["key"],
    value=raw.get("value") or "",
    effect=_TAINT_EFFECTS.get(effect, effect),
  )


def _to_int(value) -> Optional[int]:
  """GKE serialises int64 fields as strings; "" and None mean unset."""
  if value is None or value == "":
    return None
  return int(value)
