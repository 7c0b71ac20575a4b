"""Names, labels, and defaults shared by the mapper and the CLI."""

PROJECT_ENV_VAR = "MIG_NODEPOOLS_PROJECT"
REGION_ENV_VAR = "MIG_NODEPOOLS_REGION"
CLUSTER_ENV_VAR = "MIG_NODEPOOLS_CLUSTER"
OUTPUT_DIR_ENV_VAR = "MIG_NODEPOOLS_OUTPUT_DIR"

# GKE rejects node pool names longer than 40 characters.
MAX_POOL_NAME_LENGTH = 40

SINGLE_POOL_SUFFIX = "-mig-enabled"

# MIG partition sizes, smallest slice first.
PARTITION_SIZES = ("1g.5gb", "2g.10gb", "3g.20gb")

# Substrings marking a pool this tool (or an earlier run of it) created.
MIG_NAME_MARKERS = ("-mig-enabled", "-mig-1g-", "-mig-2g-", "-mig-3g-")

# Accelerator types that support MIG partitioning.
MIG_CAPABLE_ACCELERATORS = (
  "nvidia-tesla-a100",
  "nvidia-a100-80gb",
  "nvidia-tesla-a30",
  "nvidia-h100",
  "nvidia-l40s",
)

MIG_CONFIG_LABEL = "nvidia.com/mig.config"
MIG_CONFIG_VALUE = "mixed"
DEFAULT_AFFINITY_LABEL_KEY = "nodepool.affinity"

GPU_TAINT = "nvidia.com/gpu=present:NoSchedule"

DEFAULT_OAUTH_SCOPES = ("https://www.googleapis.com/auth/cloud-platform",)

# Source pools above this size get a warning before being cloned.
HIGH_NODE_COUNT = 10

DEFAULT_OUTPUT_DIR = "."

# NVIDIA DRA driver (Dynamic Resource Allocation).
DRA_API_GROUP = "resource.k8s.io"
DRA_DRIVER_NAME = "gpu.nvidia.com"
DRA_HELM_REPO_NAME = "nvidia"
DRA_HELM_REPO_URL = "https://helm.ngc.nvidia.com/nvidia"
DRA_HELM_RELEASE = "nvidia-dra-driver-gpu"
DRA_HELM_CHART = "nvidia/nvidia-dra-driver-gpu"
DRA_HELM_CHART_VERSION = "v25.8.1"
DRA_NAMESPACE = "nvidia-dra-driver-gpu"
DEFAULT_DRA_VALUES_FILE = "dra-driver-gcp.yaml"


def partition_suffix(partition_size):
  """Return the pool-name suffix for a partition size ('1g.5gb' -> '-mig-1g-5gb')."""
  return "-mig-" + partition_size.replace(".", "-")


def region_flag(location):
  """Return the gcloud location flag for a region or a zone."""
  # Zones carry a trailing letter segment: "us-central1-a".
  if location.count("-") >= 2:
    return f"--zone={location}"
  return f"--region={location}"
