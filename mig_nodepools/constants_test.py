"""Tests for mig_nodepools.constants — derived names and location flags."""

from absl.testing import absltest, parameterized

from mig_nodepools.constants import (
  DEFAULT_OUTPUT_DIR,
  MIG_NAME_MARKERS,
  PARTITION_SIZES,
  partition_suffix,
  region_flag,
)


class TestPartitionSuffix(parameterized.TestCase):
  @parameterized.parameters(
    ("1g.5gb", "-mig-1g-5gb"),
    ("2g.10gb", "-mig-2g-10gb"),
    ("3g.20gb", "-mig-3g-20gb"),
  )
  def test_suffix(self, size, expected):
    self.assertEqual(partition_suffix(size), expected)

  def test_every_suffix_is_a_marker(self):
    for size in PARTITION_SIZES:
      suffix = partition_suffix(size)
      self.assertTrue(any(m in suffix for m in MIG_NAME_MARKERS), suffix)


class TestRegionFlag(parameterized.TestCase):
  @parameterized.parameters(
    ("us-central1", "--region=us-central1"),
    ("europe-west4", "--region=europe-west4"),
    ("us-central1-a", "--zone=us-central1-a"),
    ("europe-west4-b", "--zone=europe-west4-b"),
  )
  def test_flag(self, location, expected):
    self.assertEqual(region_flag(location), expected)


class TestDefaults(absltest.TestCase):
  def test_output_dir_default_is_cwd(self):
    self.assertEqual(DEFAULT_OUTPUT_DIR, ".")


if __name__ == "__main__":
  absltest.main()
