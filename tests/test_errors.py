import pytest

from plrustkit import errors


def test_unsupported_value_type_message_and_value():
    err = errors.UnsupportedValueType(42)
    assert err.value == 42
    assert str(err) == "Unsupported value type: 42"


def test_version_missing_message():
    assert str(errors.VersionMissing()) == "Dependency entry is missing the `version` attribute"


def test_static_allow_list_messages():
    assert str(errors.CannotReadAllowList()) == "Cannot read allow-list dependency file"
    assert str(errors.NotATomlFile()) == "Not a TOML file"
    assert (
        str(errors.NotConfigured())
        == "`plrust.allowed_dependencies` is not set in `postgresql.conf`"
    )
    assert (
        str(errors.InvalidPath())
        == "The value of `plrust.allowed_dependencies` is not a valid path"
    )


def test_malformed_version_fields():
    err = errors.MalformedVersion("=1.2.3.4.5", "bad input")
    assert err.version == "=1.2.3.4.5"
    assert err.reason == "bad input"
    assert str(err) == "`=1.2.3.4.5` is malformed: bad input"


def test_version_not_permitted_message():
    err = errors.VersionNotPermitted("1.2.3")
    assert str(err) == "`1.2.3` is not permitted by the allow-list"


def test_unsupported_versionreq_message():
    err = errors.UnsupportedVersionReq("^1.2.3")
    assert str(err).startswith("`^1.2.3` is not a supported version requirement.")
    assert "bounded ranges (`>=a.b.c, <=x.y.z`)" in str(err)


def test_equality_by_type_and_value():
    assert errors.UnsupportedVersionReq("1.2.3") == errors.UnsupportedVersionReq("1.2.3")
    assert errors.UnsupportedVersionReq("1.2.3") != errors.UnsupportedVersionReq("1.2.4")
    assert errors.VersionNotPermitted("1.2.3") != errors.UnsupportedVersionReq("1.2.3")
    assert errors.VersionMissing() == errors.VersionMissing()


def test_hash_consistent_with_equality():
    first = errors.UnsupportedValueType([1, 2])
    second = errors.UnsupportedValueType([1, 2])
    assert first == second
    assert hash(first) == hash(second)


def test_hierarchy():
    malformed = errors.MalformedVersion("x", "y")
    assert isinstance(malformed, errors.AllowListError)
    assert isinstance(malformed, errors.PlRustError)
    assert str(malformed) == "`x` is malformed: y"

    unsupported = errors.UnsupportedTarget()
    assert isinstance(unsupported, errors.TargetError)
    assert str(unsupported) == "unsupported target tuple"

    with pytest.raises(errors.PlRustError) as info:
        raise errors.NotConfigured()
    assert str(info.value) == "`plrust.allowed_dependencies` is not set in `postgresql.conf`"


def test_target_errors():
    assert str(errors.UnsupportedTarget()) == "unsupported target tuple"
    err = errors.FunctionNotCompiledForTarget("x86_64-unknown-linux-gnu")
    assert str(err) == "Function was not compiled for this host (`x86_64-unknown-linux-gnu`)"


def test_no_such_function():
    err = errors.NoSuchFunction(16384)
    assert err.oid == 16384
    assert str(err) == "Function `16384` does not exist"


def test_invalid_argument_name_messages():
    assert str(errors.InvalidArgumentName("")) == "PL/Rust does not support unnamed arguments"
    err = errors.InvalidArgumentName("this isn't a valid rust identifier")
    assert str(err).endswith(
        "is an invalid Rust identifier and cannot be used as an argument name"
    )
    assert err.detail.startswith("PL/Rust argument names must also be valid Rust identifiers.")


def test_alter_strict_message():
    err = errors.AlterStrictError()
    assert str(err) == "plrust functions cannot have their STRICT property altered"
    assert "CREATE OR REPLACE FUNCTION" in err.hint