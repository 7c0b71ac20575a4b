"""Tests for mig_nodepools.backend.node_pools — gcloud invocations."""

import json
import os
import pathlib
import subprocess
import tempfile
from unittest import mock

import yaml
from absl.testing import absltest

from mig_nodepools.backend import node_pools
from mig_nodepools.core.descriptor import SourcePoolDescriptor
from mig_nodepools.core.mapper import MigTarget, Mode, build_creation_parameters

_MODULE = "mig_nodepools.backend.node_pools"


def _make_temp_path(test_case):
  """Create a temp directory that is cleaned up after the test."""
  td = tempfile.TemporaryDirectory()
  test_case.addCleanup(td.cleanup)
  return pathlib.Path(td.name)


def _completed(returncode=0, stdout="", stderr=""):
  result = mock.MagicMock()
  result.returncode = returncode
  result.stdout = stdout
  result.stderr = stderr
  return result


class TestListNodePools(absltest.TestCase):
  def test_parses_json(self):
    pools = [{"name": "a"}, {"name": "b"}]
    with mock.patch(f"{_MODULE}.subprocess.run") as mock_run:
      mock_run.return_value = _completed(stdout=json.dumps(pools))
      result = node_pools.list_node_pools("c", "us-central1", "proj")

    self.assertEqual(result, pools)
    args = mock_run.call_args[0][0]
    self.assertEqual(args[:4], ["gcloud", "container", "node-pools", "list"])
    self.assertIn("--cluster=c", args)
    self.assertIn("--region=us-central1", args)
    self.assertIn("--project=proj", args)
    self.assertIn("--format=json", args)

  def test_empty_output(self):
    with mock.patch(f"{_MODULE}.subprocess.run") as mock_run:
      mock_run.return_value = _completed(stdout="  \n")
      self.assertEqual(node_pools.list_node_pools("c", "us-central1"), [])

  def test_malformed_output(self):
    with (
      mock.patch(f"{_MODULE}.subprocess.run") as mock_run,
      self.assertRaisesRegex(RuntimeError, "Could not parse gcloud output"),
    ):
      mock_run.return_value = _completed(stdout="WARNING: not json")
      node_pools.list_node_pools("c", "us-central1")

  def test_failure(self):
    with (
      mock.patch(f"{_MODULE}.subprocess.run") as mock_run,
      self.assertRaisesRegex(RuntimeError, "Failed to list node pools"),
    ):
      mock_run.return_value = _completed(returncode=1, stderr="denied")
      node_pools.list_node_pools("c", "us-central1")


class TestDescribeNodePool(absltest.TestCase):
  def test_describe(self):
    with mock.patch(f"{_MODULE}.subprocess.run") as mock_run:
      mock_run.return_value = _completed(stdout='{"name": "a"}')
      result = node_pools.describe_node_pool("a", "c", "us-central1-a")

    self.assertEqual(result, {"name": "a"})
    args = mock_run.call_args[0][0]
    self.assertEqual(args[3:5], ["describe", "a"])
    self.assertIn("--zone=us-central1-a", args)

  def test_describe_failure(self):
    with (
      mock.patch(f"{_MODULE}.subprocess.run") as mock_run,
      self.assertRaisesRegex(RuntimeError, "Failed to describe node pool 'a'"),
    ):
      mock_run.return_value = _completed(returncode=1, stderr="not found")
      node_pools.describe_node_pool("a", "c", "us-central1")

  def test_describe_malformed_output(self):
    with (
      mock.patch(f"{_MODULE}.subprocess.run") as mock_run,
      self.assertRaisesRegex(RuntimeError, "node pool 'a'"),
    ):
      mock_run.return_value = _completed(stdout="{truncated")
      node_pools.describe_node_pool("a", "c", "us-central1")

  def test_exists(self):
    with mock.patch(f"{_MODULE}.subprocess.run") as mock_run:
      mock_run.return_value = _completed(returncode=0)
      self.assertTrue(node_pools.node_pool_exists("a", "c", "us-central1"))
      mock_run.return_value = _completed(returncode=1)
      self.assertFalse(node_pools.node_pool_exists("a", "c", "us-central1"))


class TestCreateNodePool(absltest.TestCase):
  def _spec(self):
    return build_creation_parameters(
      SourcePoolDescriptor(
        name="gpu", accelerator_type="nvidia-tesla-a100", accelerator_count=1
      ),
      MigTarget(Mode.PARTITIONED, "1g.5gb"),
    )

  def test_runs_create(self):
    with mock.patch(f"{_MODULE}.subprocess.run") as mock_run:
      node_pools.create_node_pool(self._spec(), "c", "us-central1")

    args = mock_run.call_args[0][0]
    self.assertEqual(args[3:5], ["create", "gpu-mig-1g-5gb"])
    self.assertTrue(mock_run.call_args[1]["check"])

  def test_create_failure(self):
    with (
      mock.patch(
        f"{_MODULE}.subprocess.run",
        side_effect=subprocess.CalledProcessError(
          1, "gcloud", stderr="quota exceeded"
        ),
      ),
      self.assertRaisesRegex(RuntimeError, "quota exceeded"),
    ):
      node_pools.create_node_pool(self._spec(), "c", "us-central1")


class TestSnapshots(absltest.TestCase):
  def test_save_snapshot(self):
    out_dir = str(_make_temp_path(self) / "snapshots")
    path = node_pools.save_snapshot(
      {"name": "a", "config": {"machineType": "a2-highgpu-1g"}},
      out_dir,
      node_pools.snapshot_filename("old", "a"),
    )

    self.assertEqual(os.path.basename(path), "old-nodepool-a.yaml")
    with open(path) as f:
      self.assertEqual(
        yaml.safe_load(f),
        {"name": "a", "config": {"machineType": "a2-highgpu-1g"}},
      )


  def test_save_snapshot_unwritable(self):
    blocker = _make_temp_path(self) / "not-a-dir"
    blocker.write_text("")
    with self.assertRaisesRegex(RuntimeError, "Failed to save"):
      node_pools.save_snapshot(
        {"name": "a"}, str(blocker / "snapshots"), "old-nodepool-a.yaml"
      )

if __name__ == "__main__":
  absltest.main()
