# helmkit

Tools for writing tests around Helm charts and Kubernetes manifests.

- `helmkit.client`: a sandboxed client for the `helm` command line tool. Each
  `Client` gets its own `HELM_CONFIG_HOME`, and optionally its own kubeconfig,
  so tests stay hermetic while the global helm cache is shared.
- `helmkit.flags`: declare option dataclasses whose fields map onto command
  line flags with `flag(...)`, then turn an instance into `--flag=value`
  arguments with `to_flags`.
- `helmkit.serde`: encode and decode multi-document Kubernetes YAML
  (`encode_yaml`, `encode_yaml_into`, `decode_yaml`, `decode_yaml_from`).
- `helmkit.kubeconfig`: build a minimal kubeconfig from a `RestConfig` with
  `rest_to_config`, and write or read it with `write_to_file` and
  `load_from_file`.
- `helmkit.golden`: snapshot ("golden file") assertions for YAML, JSON, text
  and bytes (`assert_golden`, `GoldenAssertion`), with a readable YAML diff
  (`yaml_diff`).
- `helmkit.valuesutil`: validate values against a JSON schema (`validate`,
  which raises `ValidationFailed`), derive a schema from a dataclass
  (`generate_schema`), and convert values through typed structures
  (`unmarshal_into`, `round_trip_through`).
- `helmkit.fuzz`: generate random values that satisfy a JSON schema
  (`generate`), for property testing charts. `RegexGenerator` produces strings
  matching a regular expression; `SchemaGenerationError` is raised for
  schemas the generator cannot satisfy.

## Installation

```
pip install helmkit
```

The client runs `helm`, which must be on `PATH`.

## Examples

Turning options into flags:

```python
from dataclasses import dataclass
from helmkit.flags import flag, to_flags

@dataclass
class Flags:
    no_wait: bool = flag("wait", default=False)
    string_flag: str = flag("string-flag", default="")
    string_array: list[str] = flag("string-array", default_factory=list)

to_flags(Flags(string_flag="x", string_array=["1", "2"]))
# ['--wait=true', '--string-flag=x', '--string-array=1', '--string-array=2']
```

Boolean fields named `no_...` are negated unless their flag itself starts with
`no-`; empty strings are left out; a field flagged `"-"` is never rendered.

Working with helm:

```python
from helmkit.client import Client, Options, InstallOptions

client = Client(Options())
client.repo_add("example", "https://charts.example.com")
release = client.install("example/app", InstallOptions(namespace="demo", values={"replicas": 1}))
print(release.name, release.status)
```

`Client` also offers `list`, `get`, `show_values`, `get_values`, `upgrade`,
`test`, `repo_list`, `search`, `dependency_build`, `download_file` and
`template`. `template` runs `helm template` with `--kube-version=v1.21.0`
and the namespace `default` unless one is given. Values passed as a
`RawYAML` are written verbatim; other values are serialized to YAML into a
values file in the client's config home. A failing helm invocation raises
`HelmError`, which carries the captured `stdout` and `stderr`.

`get_chart_lock` and `update_chart_lock` read and write `Chart.lock` files as
`ChartLock` objects.

Fuzzing values from a schema:

```python
import random
from helmkit.fuzz import generate
from helmkit.valuesutil import validate

schema = {"type": "object", "properties": {"port": {"type": "integer", "maximum": 100}}}
value = generate(random.Random(0), schema)
validate(schema, value)
```

The same seed always yields the same value.

Golden files:

```python
from helmkit.golden import GoldenAssertion, assert_golden

assert_golden(GoldenAssertion.YAML, "testdata/out.golden.yaml", rendered, update=False)
```

Pass `update=True` to rewrite the snapshot instead of comparing against it. A
mismatch raises `GoldenMismatch`, an `AssertionError`.

## What it does not do

helmkit does not talk to the Kubernetes API itself: there is no client for
getting, creating, deleting or exec'ing into objects. It only writes a
kubeconfig for helm to use. Manifests are handled as plain mappings, checked
for `apiVersion` and `kind`, not as typed Kubernetes objects. There is no
command line program of its own.

## Running the tests

```
pip install -e ".[test]"
pytest
```