"""Helpers for testing Helm charts and Kubernetes manifests."""

__version__ = "0.1.0"

__all__ = ["client", "flags", "fuzz", "golden", "kubeconfig", "serde", "valuesutil"]