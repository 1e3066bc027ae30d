"""Build, write and read kubeconfig documents."""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_CLUSTER = "default-cluster"
_CONTEXT = "default-context"
_USER = "default-user"


@dataclass
class RestConfig:
    """Connection details for a Kubernetes API server."""

    host: str = ""
    ca_data: bytes = b""
    cert_data: bytes = b""
    key_data: bytes = b""


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def rest_to_config(cfg: RestConfig) -> dict[str, Any]:
    """Express ``cfg`` as a kubeconfig with a single cluster, user and context."""
    cluster: dict[str, Any] = {"server": cfg.host}
    if cfg.ca_data:
        cluster["certificate-authority-data"] = _b64(cfg.ca_data)

    user: dict[str, Any] = {}
    if cfg.cert_data:
        user["client-certificate-data"] = _b64(cfg.cert_data)
    if cfg.key_data:
        user["client-key-data"] = _b64(cfg.key_data)

    return {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": _CLUSTER, "cluster": cluster}],
        "contexts": [{"name": _CONTEXT, "context": {"cluster": _CLUSTER, "user": _USER}}],
        "current-context": _CONTEXT,
        "users": [{"name": _USER, "user": user}],
        "preferences": {},
    }


def write_to_file(config: dict[str, Any], path: str | os.PathLike[str]) -> None:
    """Write ``config`` as YAML to ``path``, readable only by its owner."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        yaml.safe_dump(config, handle, sort_keys=False)


def load_from_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read a kubeconfig written by :func:`write_to_file` or by other tools."""
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{os.fspath(path)!r} does not hold a kubeconfig mapping")
    return data