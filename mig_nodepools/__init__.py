"""Clone GKE GPU node pools into MIG-enabled node pools."""

__version__ = "0.1.0"
