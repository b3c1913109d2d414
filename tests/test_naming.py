from plrustkit.naming import crate_name, symbol_name


def test_symbol_name_format():
    assert symbol_name(16384, 42) == "plrust_fn_oid_16384_42"


def test_symbol_name_distinguishes_databases():
    assert symbol_name(1, 42) != symbol_name(2, 42)
    assert symbol_name(1, 42).startswith("plrust_fn_oid_")


def test_crate_name_extends_symbol_name():
    name = crate_name(16384, 42, 99)
    assert name.startswith(symbol_name(16384, 42) + "_")
    assert name.rsplit("_", 1)[1] == "99"


def test_crate_name_unique_per_generation():
    assert crate_name(1, 2, 3) != crate_name(1, 2, 4)