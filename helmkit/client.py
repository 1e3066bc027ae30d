"""A sandboxed programmatic interface to the ``helm`` command line tool."""

from __future__ import annotations

import dataclasses
import datetime as dt
import json
import logging
import os
import re
import shutil
import subprocess
import tempfile
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from helmkit.flags import flag, to_flags
from helmkit.kubeconfig import RestConfig, rest_to_config, write_to_file
from helmkit.valuesutil import unmarshal_into

log = logging.getLogger(__name__)

_UTC = dt.timezone.utc
_ZERO_TIME = dt.datetime(1, 1, 1, tzinfo=_UTC)
_KUBE_VERSION = "v1.21.0"


class HelmError(Exception):
    """Raised when a helm invocation fails."""

    def __init__(self, message: str, stdout: bytes = b"", stderr: bytes = b"") -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class RawYAML(bytes):
    """Values that are already serialized YAML and are written out verbatim."""


def _parse_time(value: Any) -> dt.datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value if value.tzinfo else value.replace(tzinfo=_UTC)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = re.sub(r"\.(\d+)", lambda m: "." + (m.group(1) + "000000")[:6], text)
    parsed = dt.datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=_UTC)


def _format_time(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=_UTC)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = int(value.utcoffset().total_seconds())
    if offset == 0:
        return text + "Z"
    sign = "+" if offset > 0 else "-"
    hours, minutes = divmod(abs(offset) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


@dataclass
class Repo:
    """A configured chart repository."""

    name: str
    url: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Repo:
        return cls(name=data.get("name", ""), url=data.get("url", ""))


@dataclass
class Chart:
    """A chart found by searching the configured repositories."""

    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chart:
        return cls(
            name=data.get("name", ""),
            version=data.get("version", ""),
            app_version=data.get("app_version", ""),
            description=data.get("description", ""),
        )


@dataclass
class Dependency:
    """A chart upon which another chart depends."""

    name: str
    version: str = ""
    repository: str = ""
    condition: str = ""
    tags: list[str] = field(default_factory=list)
    enabled: bool = False
    import_values: list[Any] = field(default_factory=list)
    alias: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dependency:
        return cls(
            name=data.get("name", ""),
            version=data.get("version") or "",
            repository=data.get("repository") or "",
            condition=data.get("condition") or "",
            tags=list(data.get("tags") or []),
            enabled=bool(data.get("enabled", False)),
            import_values=list(data.get("import-values") or []),
            alias=data.get("alias") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.version:
            out["version"] = self.version
        out["repository"] = self.repository
        if self.condition:
            out["condition"] = self.condition
        if self.tags:
            out["tags"] = list(self.tags)
        if self.enabled:
            out["enabled"] = True
        if self.import_values:
            out["import-values"] = list(self.import_values)
        if self.alias:
            out["alias"] = self.alias
        return out


@dataclass
class ChartLock:
    """A helm lock file for dependencies."""

    generated: dt.datetime = _ZERO_TIME
    digest: str = ""
    dependencies: list[Dependency] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChartLock:
        return cls(
            generated=_parse_time(data.get("generated")) or _ZERO_TIME,
            digest=data.get("digest") or "",
            dependencies=[Dependency.from_dict(d) for d in data.get("dependencies") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated": _format_time(self.generated),
            "digest": self.digest,
            "dependencies": [d.to_dict() for d in self.dependencies],
        }


@dataclass
class Release:
    """An installed helm release."""

    name: str = ""
    namespace: str = ""
    revision: int = 0
    deployed_at: dt.datetime | None = None
    status: str = ""
    chart: str = ""
    app_version: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Release:
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            revision=int(data.get("revision") or 0),
            deployed_at=_parse_time(data.get("deployedAt")),
            status=data.get("status", ""),
            chart=data.get("chart", ""),
            app_version=data.get("app_version", ""),
        )


@dataclass
class Options:
    """Settings for a new :class:`Client`."""

    config_home: str = ""
    kube_config: RestConfig | None = None


@dataclass
class InstallOptions:
    create_namespace: bool = flag("create-namespace", default=False)
    name: str = flag("-", default="")
    namespace: str = flag("namespace", default="")
    values: Any = flag("-", default=None)
    version: str = flag("version", default="")
    no_wait: bool = flag("wait", default=False)
    no_wait_for_jobs: bool = flag("wait-for-jobs", default=False)
    generate_name: bool = flag("generate-name", default=False)
    values_file: str = flag("values", default="")
    set: list[str] = flag("set", default_factory=list)


@dataclass
class TemplateOptions:
    name: str = flag("-", default="")
    namespace: str = flag("namespace", default="")
    values: Any = flag("-", default=None)
    version: str = flag("version", default="")
    generate_name: bool = flag("generate-name", default=False)
    values_file: str = flag("values", default="")
    set: list[str] = flag("set", default_factory=list)
    skip_tests: bool = flag("skip-tests", default=False)


@dataclass
class UpgradeOptions:
    create_namespace: bool = flag("create-namespace", default=False)
    install: bool = flag("install", default=False)
    namespace: str = flag("namespace", default="")
    version: str = flag("version", default="")
    no_wait: bool = flag("wait", default=False)
    no_wait_for_jobs: bool = flag("wait-for-jobs", default=False)
    reuse_values: bool = flag("reuse-values", default=False)
    values: Any = flag("-", default=None)
    values_file: str = flag("values", default="")
    set: list[str] = flag("set", default_factory=list)


class Client:
    """A sandboxed programmatic API for the ``helm`` CLI.

    Every client uses its own HELM_CONFIG_HOME so operations stay hermetic,
    while the global helm cache is shared.
    """

    def __init__(self, opts: Options | None = None) -> None:
        opts = opts or Options()
        config_home = opts.config_home or tempfile.mkdtemp(prefix="go-helm-client")
        Path(config_home).mkdir(parents=True, exist_ok=True)

        kube_config_path = os.devnull
        if opts.kube_config is not None:
            kube_config_path = os.path.join(config_home, "kubeconfig")
            write_to_file(rest_to_config(opts.kube_config), kube_config_path)

        self._config_home = config_home
        self._env = {
            **os.environ,
            "KUBECONFIG": kube_config_path,
            "HELM_CONFIG_HOME": os.path.join(config_home, "helm-config"),
        }

    @property
    def config_home(self) -> str:
        return self._config_home

    @property
    def env(self) -> dict[str, str]:
        """The environment helm is run with."""
        return dict(self._env)

    def list(self) -> list[Release]:
        stdout, _ = self._run("list", "-A", "--output=json")
        return [Release.from_dict(r) for r in json.loads(stdout) or []]

    def get(self, namespace: str, name: str) -> Release:
        stdout, _ = self._run("get", "metadata", name, "--output=json", "--namespace", namespace)
        return Release.from_dict(json.loads(stdout))

    def show_values(self, chart: str) -> Any:
        stdout, _ = self._run("show", "values", chart)
        return yaml.safe_load(stdout)

    def get_values(self, release: Release) -> Any:
        stdout, _ = self._run(
            "get", "values", release.name, "--output=json", "--namespace", release.namespace
        )
        return json.loads(stdout)

    def install(self, chart: str, opts: InstallOptions | None = None) -> Release:
        opts = dataclasses.replace(opts or InstallOptions())
        if not opts.name:
            opts.generate_name = True
        if opts.values is not None:
            opts.values_file = self._write_values(opts.values)

        args = ["install", chart, "--output=json", *to_flags(opts)]
        if opts.name:
            args.insert(1, opts.name)

        stdout, _ = self._run(*args)
        result = json.loads(stdout)
        return self.get(opts.namespace, result["name"])

    def template(self, chart: str, opts: TemplateOptions | None = None) -> bytes:
        """Render a chart locally without contacting a cluster, hooks included."""
        opts = opts or TemplateOptions()
        if opts.name and opts.generate_name:
            raise HelmError("cannot set --generate-name and also specify a name")
        opts = dataclasses.replace(opts, namespace=opts.namespace or "default")

        args = ["template"]
        if opts.name:
            args.append(opts.name)
        args += [chart, f"--kube-version={_KUBE_VERSION}"]
        if opts.values is not None:
            args.append(f"--values={self._write_values(opts.values)}")
        args += to_flags(opts)

        stdout, _ = self._run(*args)
        return stdout

    def download_file(self, url: str, filename: str) -> Path:
        """Fetch ``url`` into ``filename`` within the config home."""
        target = Path(self._config_home) / filename
        with urllib.request.urlopen(url) as response, open(target, "wb") as out:
            shutil.copyfileobj(response, out)
        return target

    def upgrade(self, release: str, chart: str, opts: UpgradeOptions | None = None) -> Release:
        opts = dataclasses.replace(opts or UpgradeOptions())
        if opts.values is not None:
            opts.values_file = self._write_values(opts.values)

        args = ["upgrade", release, chart, "--output=json", *to_flags(opts)]
        stdout, _ = self._run(*args)
        result = json.loads(stdout)
        return self.get(opts.namespace, result["name"])

    def test(self, release: Release) -> None:
        try:
            self._run("test", release.name, "--namespace", release.namespace, "--logs")
        except HelmError as exc:
            stdout = exc.stdout.decode("utf-8", "replace")
            raise HelmError(f"stdout: {stdout}: {exc}", exc.stdout, exc.stderr) from exc

    def repo_list(self) -> list[Repo]:
        stdout, _ = self._run("repo", "list", "--output=json")
        return [Repo.from_dict(r) for r in json.loads(stdout) or []]

    def repo_add(self, name: str, url: str) -> None:
        self._run("repo", "add", name, url)

    def search(self, keyword: str) -> list[Chart]:
        stdout, _ = self._run("search", "repo", keyword, "--output=json")
        return [Chart.from_dict(c) for c in json.loads(stdout) or []]

    def dependency_build(self, chart_dir: str) -> None:
        self._run("dep", "build", cwd=chart_dir)

    def _run(self, *args: str, cwd: str | None = None) -> tuple[bytes, bytes]:
        command = ["helm", *args]
        log.info("Executing: %r", " ".join(command))
        try:
            proc = subprocess.run(command, cwd=cwd, env=self._env, capture_output=True, check=False)
        except OSError as exc:
            raise HelmError(f"failed to execute helm: {exc}") from exc
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "replace")
            raise HelmError(
                f"helm exited with status {proc.returncode}: stderr: {stderr}",
                proc.stdout,
                proc.stderr,
            )
        return proc.stdout, proc.stderr

    def _write_values(self, values: Any) -> str:
        """Write a values file to a unique path in the config home and return it."""
        if isinstance(values, RawYAML):
            payload = bytes(values)
        else:
            payload = yaml.safe_dump(unmarshal_into(values, Any)).encode("utf-8")
        fd, path = tempfile.mkstemp(prefix="values-", suffix=".yaml", dir=self._config_home)
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        return path


def get_chart_lock(file_path: str | os.PathLike[str]) -> ChartLock:
    """Read a Chart.lock file."""
    data = yaml.safe_load(Path(file_path).read_bytes())
    return ChartLock.from_dict(data or {})


def update_chart_lock(chart_lock: ChartLock, file_path: str | os.PathLike[str]) -> None:
    """Write ``chart_lock`` to ``file_path`` as YAML."""
    Path(file_path).write_text(yaml.safe_dump(chart_lock.to_dict()), encoding="utf-8")