"""Tests for mig_nodepools.core.descriptor — NodePool JSON parsing."""

from absl.testing import absltest, parameterized

from mig_nodepools.core.descriptor import (
  SourcePoolDescriptor,
  Taint,
  from_node_pool,
  is_mig_capable,
)

# Trimmed output of `gcloud container node-pools describe --format=json`.
_FULL_POOL = {
  "name": "a100-pool",
  "status": "RUNNING",
  "initialNodeCount": 2,
  "locations": ["us-central1-a", "us-central1-c"],
  "config": {
    "machineType": "a2-highgpu-1g",
    "imageType": "COS_CONTAINERD",
    "diskType": "pd-balanced",
    "diskSizeGb": 200,
    "serviceAccount": "gpu-nodes@proj.iam.gserviceaccount.com",
    "oauthScopes": [
      "https://www.googleapis.com/auth/devstorage.read_only",
      "https://www.googleapis.com/auth/logging.write",
    ],
    "accelerators": [
      {
        "acceleratorType": "nvidia-tesla-a100",
        "acceleratorCount": "1",
        "gpuDriverInstallationConfig": {"gpuDriverVersion": "LATEST"},
      }
    ],
    "labels": {"team": "ml"},
    "resourceLabels": {"cost-center": "research"},
    "taints": [
      {"key": "dedicated", "value": "ml", "effect": "NO_SCHEDULE"},
      {"key": "spot", "effect": "NO_EXECUTE"},
    ],
    "spot": True,
    "localSsdCount": 1,
    "bootDiskKmsKey": "projects/p/locations/l/keyRings/r/cryptoKeys/k",
    "shieldedInstanceConfig": {
      "enableIntegrityMonitoring": True,
      "enableSecureBoot": True,
    },
    "minCpuPlatform": "Intel Cascade Lake",
    "reservationAffinity": {"consumeReservationType": "ANY_RESERVATION"},
    "sandboxConfig": {"type": "GVISOR"},
  },
  "autoscaling": {"enabled": True, "minNodeCount": 1, "maxNodeCount": 4},
  "management": {"autoRepair": True, "autoUpgrade": False},
  "maxPodsConstraint": {"maxPodsPerNode": "110"},
}


class TestFromNodePool(absltest.TestCase):
  def test_full_pool(self):
    d = from_node_pool(_FULL_POOL)
    self.assertEqual(d.name, "a100-pool")
    self.assertEqual(d.status, "RUNNING")
    self.assertEqual(d.machine_type, "a2-highgpu-1g")
    self.assertEqual(d.disk_size_gb, 200)
    self.assertEqual(d.initial_node_count, 2)
    self.assertEqual(d.accelerator_type, "nvidia-tesla-a100")
    self.assertEqual(d.accelerator_count, 1)
    self.assertEqual(d.gpu_driver_version, "LATEST")
    self.assertLen(d.oauth_scopes, 2)
    self.assertTrue(d.autoscaling_enabled)
    self.assertEqual((d.autoscaling_min, d.autoscaling_max), (1, 4))
    self.assertTrue(d.auto_repair)
    self.assertFalse(d.auto_upgrade)
    self.assertEqual(d.max_pods_per_node, 110)
    self.assertEqual(d.node_locations, ("us-central1-a", "us-central1-c"))
    self.assertTrue(d.spot)
    self.assertFalse(d.preemptible)
    self.assertEqual(d.local_ssd_count, 1)
    self.assertTrue(d.shielded_secure_boot)
    self.assertEqual(d.labels, {"team": "ml"})
    self.assertEqual(d.resource_labels, {"cost-center": "research"})
    self.assertEqual(d.min_cpu_platform, "Intel Cascade Lake")
    self.assertEqual(d.reservation_affinity, "ANY_RESERVATION")
    self.assertEqual(d.sandbox_type, "GVISOR")

  def test_taint_effects_converted(self):
    d = from_node_pool(_FULL_POOL)
    self.assertEqual(
      d.taints,
      (
        Taint("dedicated", "ml", "NoSchedule"),
        Taint("spot", "", "NoExecute"),
      ),
    )
    self.assertEqual(
      [str(t) for t in d.taints], ["dedicated=ml:NoSchedule", "spot:NoExecute"]
    )

  def test_minimal_pool(self):
    d = from_node_pool({"name": "bare"})
    self.assertEqual(d, SourcePoolDescriptor(name="bare"))
    self.assertIsNone(d.accelerator_type)
    self.assertEqual(d.taints, ())

  def test_autoscaling_from_zero(self):
    d = from_node_pool(
      {"name": "p", "autoscaling": {"enabled": True, "maxNodeCount": 4}}
    )
    self.assertEqual((d.autoscaling_min, d.autoscaling_max), (0, 4))

  def test_empty_strings_are_unset(self):
    d = from_node_pool(
      {"name": "p", "initialNodeCount": "", "config": {"diskSizeGb": ""}}
    )
    self.assertIsNone(d.initial_node_count)
    self.assertIsNone(d.disk_size_gb)


class TestNodeCount(parameterized.TestCase):
  @parameterized.parameters((None, 1, True), (0, 0, True), (4, 4, False))
  def test_counts(self, initial, expected_count, expected_empty):
    d = SourcePoolDescriptor(name="p", initial_node_count=initial)
    self.assertEqual(d.node_count, expected_count)
    self.assertEqual(d.is_empty, expected_empty)


class TestIsMigCapable(parameterized.TestCase):
  @parameterized.parameters(
    "nvidia-tesla-a100",
    "nvidia-a100-80gb",
    "nvidia-tesla-a30",
    "nvidia-h100-80gb",
    "nvidia-h100-mega-80gb",
    "nvidia-l40s",
  )
  def test_capable(self, accel):
    self.assertTrue(
      is_mig_capable(SourcePoolDescriptor(name="p", accelerator_type=accel))
    )

  @parameterized.parameters("nvidia-l4", "nvidia-tesla-t4", None)
  def test_not_capable(self, accel):
    self.assertFalse(
      is_mig_capable(SourcePoolDescriptor(name="p", accelerator_type=accel))
    )


if __name__ == "__main__":
  absltest.main()
