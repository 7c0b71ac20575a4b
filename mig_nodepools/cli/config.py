"""Typed configuration for mig-nodepools CLI commands."""

from dataclasses import dataclass
from typing import Optional

from mig_nodepools.constants import (
  DEFAULT_AFFINITY_LABEL_KEY,
  DEFAULT_DRA_VALUES_FILE,
  DEFAULT_OUTPUT_DIR,
)
from mig_nodepools.core.mapper import Mode


@dataclass
class SetupConfig:
  """Configuration for one setup run against one cluster."""

  cluster: str
  region: str  # region or zone of the cluster
  project: Optional[str] = None  # None: gcloud's configured project
  mode: Mode = Mode.PARTITIONED
  affinity_label_key: str = DEFAULT_AFFINITY_LABEL_KEY
  output_dir: str = DEFAULT_OUTPUT_DIR
  dra_values_file: str = DEFAULT_DRA_VALUES_FILE
