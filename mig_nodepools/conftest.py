"""Shared fixtures for colocated unit tests."""

import pytest


@pytest.fixture
def mock_kube_config(mocker):
  """Mock kubernetes config loading."""
  mocker.patch("mig_nodepools.backend.k8s_client._load_kube_config")


@pytest.fixture
def mock_core_v1(mocker):
  """Mock kubernetes CoreV1Api."""
  mock_api = mocker.MagicMock()
  mocker.patch("kubernetes.client.CoreV1Api", return_value=mock_api)
  return mock_api


@pytest.fixture
def mock_custom_objects(mocker):
  """Mock kubernetes CustomObjectsApi."""
  mock_api = mocker.MagicMock()
  mocker.patch("kubernetes.client.CustomObjectsApi", return_value=mock_api)
  return mock_api


@pytest.fixture
def mock_apis(mocker):
  """Mock kubernetes ApisApi (API group discovery)."""
  mock_api = mocker.MagicMock()
  mocker.patch("kubernetes.client.ApisApi", return_value=mock_api)
  return mock_api
