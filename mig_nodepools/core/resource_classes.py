"""MIG-profile device classes for the NVIDIA DRA driver.

One ``DeviceClass`` per partition size, each selecting the MIG devices of
that profile. Workloads request a slice through a ResourceClaim naming the
class, e.g. ``mig-1g.5gb``.
"""

import yaml

from mig_nodepools.constants import (
  DRA_API_GROUP,
  DRA_DRIVER_NAME,
  PARTITION_SIZES,
)

DEFAULT_API_VERSION = "v1beta1"

_SELECTOR = (
  "device.driver == '{driver}' && "
  "device.attributes['{driver}'].type == 'mig' && "
  "device.attributes['{driver}'].profile == '{profile}'"
)


def class_name(partition_size):
  """Device class name for a partition size ('1g.5gb' -> 'mig-1g.5gb')."""
  return f"mig-{partition_size}"


def device_class(partition_size, api_version=DEFAULT_API_VERSION):
  """Return the DeviceClass manifest for one MIG profile."""
  return {
    "apiVersion": f"{DRA_API_GROUP}/{api_version}",
    "kind": "DeviceClass",
    "metadata": {
      "name": class_name(partition_size),
      "labels": {"app.kubernetes.io/managed-by": "mig-nodepools"},
    },
    "spec": {
      "selectors": [
        {
          "cel": {
            "expression": _SELECTOR.format(
              driver=DRA_DRIVER_NAME, profile=partition_size
            )
          }
        }
      ]
    },
  }


def device_classes(api_version=DEFAULT_API_VERSION):
  """All MIG device classes, smallest profile first."""
  return [device_class(size, api_version) for size in PARTITION_SIZES]


def render_resource_classes(api_version=DEFAULT_API_VERSION) -> str:
  """Render all device classes as one multi-document YAML string."""
  return yaml.safe_dump_all(
    device_classes(api_version), sort_keys=False, explicit_start=True
  )
