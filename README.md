# plrustkit

plrustkit holds the bookkeeping rules that a Rust procedural language for
PostgreSQL depends on. The package has no runtime dependencies. It covers:

- `plrustkit.allow_list`: parses a TOML allow-list of crates and matches
  requested versions against it.
- `plrustkit.versions`: parses, validates, matches and orders semver versions
  and version requirements.
- `plrustkit.target`: builds host and cross-compilation target triples,
  linker variables and binding-path variables.
- `plrustkit.settings`: reads the `plrust.*` configuration options.
- `plrustkit.prosrc`: encodes and decodes the compiled shared libraries
  stored in a function's source entry.
- `plrustkit.catalog`: holds function catalog rows and checks argument names
  and argument modes.
- `plrustkit.naming`: builds symbol and crate names.
- `plrustkit.hooks`: refuses `ALTER FUNCTION` changes to `STRICT`.
- `plrustkit.logwriters`: provides file-like writers that send output to
  `logging`.
- `plrustkit.buildinfo`: finds the trusted pgrx crate version.
- `plrustkit.errors`: holds the exception classes.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Dependency allow-lists

An allow-list is a TOML document. Each key names a crate, and its value takes
one of these forms:

- a version string;
- a table with `version` and, optionally, `features` (a list of strings) and
  `default-features` (a boolean);
- an array of strings and tables.

```python
from plrustkit.allow_list import parse_allowlist, allowed_dependencies

allowlist = parse_allowlist('''
owo-colors = "=3.5.0"
tokio = { version = "=1.19.2", features = ["rt", "net"] }
plutonium = "*"
rand = ["=0.8.3", { version = ">0.8.4, <0.8.6", features = ["getrandom"] }]
''')

for row in allowed_dependencies(allowlist):
    print(row.name, row.version, row.features, row.default_features)

allowlist["tokio"].get_dependency_entry("1.19.2")
# {'version': '=1.19.2', 'features': ['rt', 'net']}
```

An allow-list entry may use only these version forms:

| Form | Example |
| --- | --- |
| Wildcard | `*` |
| Exact | `=x.y.z` |
| Bounded range | `>=a.b.c, <=x.y.z` |

Any other form raises `UnsupportedVersionReq`. A version that cannot be parsed
raises `MalformedVersion`. If no entry allows the requested version,
`Dependency.get_dependency_entry` raises `VersionNotPermitted`.

`Dependency.get_dependency_entry` picks the largest matching entry:

- For a literal version, it returns that version as an exact `=x.y.z`
  requirement.
- For a requirement that matches a wildcard entry, it returns the requirement
  unchanged.
- For a requirement that matches any other entry, it returns that entry's
  table.

`load_allowlist(settings)` reads the file named by `plrust.allowed_dependencies`.
It raises `NotConfigured` when that option is unset, `CannotReadAllowList` when
the file cannot be read, and `NotATomlFile` when the content is not TOML.

## Version requirements

```python
from plrustkit.versions import OrderedVersionReq, Version

req = OrderedVersionReq.parse(">=1.0.0, <2.0.0")
req.matches(Version.parse("1.4.2"))  # True
```

`OrderedVersionReq` values sort from smallest to largest. `*` sorts first.
After that, values are ordered by lower bound and then by upper bound.

## Settings and targets

```python
from plrustkit.settings import Settings

settings = Settings.from_options({
    "plrust.work_dir": "/var/lib/plrust",
    "plrust.compilation_targets": "x86_64, aarch64",
})
host, others = settings.compilation_targets("x86_64")
# others == [CrossCompilationTarget.AARCH64]
settings.trusted_pgrx_requirement()  # "=1.2.8"
```

Option names are case-insensitive.

- `plrust.compile_lints` defaults to the built-in lint list `DEFAULT_LINTS`.
- `plrust.required_lints` defaults to no lints.
- `tracing_level_name()` returns `INFO` when no level is set.
- `linker_for_target` reads `plrust.<arch>_linker`.
- `pgrx_bindings_for_target` reads `plrust.<arch>_pgrx_bindings_path`.

`CrossCompilationTarget.from_name` accepts `x86_64` and `aarch64`. Any other
name raises `UnsupportedTarget`.

## Stored shared libraries

```python
from plrustkit.prosrc import ProSrcEntry, update_entry

stored = update_entry("Ok(Some(1))", 1, 42, "x86_64-unknown-linux-gnu",
                      b"library bytes", ["unsafe_code"], "=1.2.8")
entry = ProSrcEntry.from_json(stored)
library = entry.take_shared_library("x86_64-unknown-linux-gnu")
library.data  # b"library bytes"
```

Libraries are gzip-compressed and stored as unpadded URL-safe base64.

- Asking for a target that has no stored library raises
  `FunctionNotCompiledForTarget`.
- `extract_source_and_capabilities` returns the user source from a stored
  entry. When the text is not a stored entry, it returns the text as is.

## Other rules

- `catalog.validate_argument_name` raises `InvalidArgumentName` for an unnamed
  argument and for a name that is not a valid identifier.
- `naming.symbol_name(1, 42)` returns `"plrust_fn_oid_1_42"`.
- `hooks.check_alter_function` raises `AlterStrictError` when an action name
  contains `strict` and the function's language is the plrust language.
- `buildinfo.find_trusted_pgrx_version` runs
  `cargo tree -p plrust-trusted-pgrx --depth 0` and returns the version it
  reports.

## What this package does not do

plrustkit does not connect to a database and does not register a language
handler. It does not compile functions or load shared libraries. It also
provides no command-line program.

All database and catalog data comes in as plain values: option mappings,
catalog rows as `ProcEntry`, and stored source strings. Results go back the
same way, as plain values.