"""Tests for mig_nodepools.core.resource_classes — DeviceClass manifests."""

import yaml
from absl.testing import absltest

from mig_nodepools.core import resource_classes


class TestDeviceClasses(absltest.TestCase):
  def test_three_profiles(self):
    names = [
      c["metadata"]["name"] for c in resource_classes.device_classes()
    ]
    self.assertEqual(names, ["mig-1g.5gb", "mig-2g.10gb", "mig-3g.20gb"])

  def test_manifest_shape(self):
    manifest = resource_classes.device_class("2g.10gb", "v1")
    self.assertEqual(manifest["apiVersion"], "resource.k8s.io/v1")
    self.assertEqual(manifest["kind"], "DeviceClass")
    expression = manifest["spec"]["selectors"][0]["cel"]["expression"]
    self.assertIn("device.driver == 'gpu.nvidia.com'", expression)
    self.assertIn("profile == '2g.10gb'", expression)

  def test_render_is_multi_document_yaml(self):
    text = resource_classes.render_resource_classes()
    docs = list(yaml.safe_load_all(text))
    self.assertLen(docs, 3)
    self.assertEqual(docs, resource_classes.device_classes())
    self.assertTrue(text.startswith("---"))
    self.assertIn("apiVersion: resource.k8s.io/v1beta1", text)

  def test_render_is_stable(self):
    self.assertEqual(
      resource_classes.render_resource_classes(),
      resource_classes.render_resource_classes(),
    )


if __name__ == "__main__":
  absltest.main()
