import pytest

from databricks.labs.grantor.errors import MalformedIdentifier
from databricks.labs.grantor.grants.identifiers import DELIMITER, GrantIdentifier, decode, encode


@pytest.mark.parametrize(
    "grant_id",
    [
        GrantIdentifier("D", "S", "T", "SELECT", False, frozenset({"R1", "R2"})),
        GrantIdentifier("D", "S", "", "SELECT", True, frozenset({"R1"})),
        GrantIdentifier("D", "", "", "OWNERSHIP", False, frozenset()),
        GrantIdentifier("my|db", "schema with spaces", "obj,name", "SELECT", False, frozenset({"A"})),
    ],
)
def test_decode_reverses_encode(grant_id) -> None:
    assert decode(encode(grant_id)) == grant_id


def test_encode_current_format() -> None:
    grant_id = GrantIdentifier("D", "S", "T", "SELECT", False, frozenset({"R2", "R1"}))
    assert encode(grant_id) == "D❄️S❄️T❄️SELECT❄️false❄️R1,R2"
    assert str(grant_id) == encode(grant_id)


def test_delimiter_is_multibyte() -> None:
    assert len(DELIMITER.encode("utf-8")) > 1


def test_decode_current_format() -> None:
    grant_id = decode("test-db❄️PUBLIC❄️test-stream❄️SELECT❄️true❄️role-a,role-b")
    assert grant_id.database_name == "test-db"
    assert grant_id.schema_name == "PUBLIC"
    assert grant_id.object_name == "test-stream"
    assert grant_id.privilege == "SELECT"
    assert grant_id.with_grant_option
    assert grant_id.roles == {"role-a", "role-b"}
    assert not grant_id.on_future


def test_decode_empty_roles_segment() -> None:
    grant_id = decode("D❄️S❄️❄️SELECT❄️false❄️")
    assert grant_id.roles == frozenset()
    assert grant_id.on_future


def test_decode_legacy_format() -> None:
    grant_id = decode("test-db|PUBLIC|test-stream|SELECT|false")
    assert grant_id == GrantIdentifier("test-db", "PUBLIC", "test-stream", "SELECT", False, frozenset())


def test_decode_legacy_with_grant_option() -> None:
    grant_id = decode("test-db|PUBLIC||SELECT|true")
    assert grant_id.with_grant_option
    assert grant_id.on_future
    assert grant_id.roles == frozenset()


@pytest.mark.parametrize("value", ["", "test-db", "test-db|PUBLIC|test-stream", "a|b|c|d|e|f"])
def test_decode_legacy_wrong_segment_count(value) -> None:
    with pytest.raises(MalformedIdentifier) as failure:
        decode(value)
    assert failure.value.segments == len(value.split("|"))


@pytest.mark.parametrize(
    "value,segments",
    [
        ("D❄️S❄️T❄️SELECT❄️false", 5),
        ("D❄️S❄️T❄️SELECT❄️false❄️R1❄️extra", 7),
        ("D❄️S", 2),
    ],
)
def test_decode_wrong_segment_count(value, segments) -> None:
    with pytest.raises(MalformedIdentifier, match=f"unexpected number of ID parts \\({segments}\\)") as failure:
        decode(value)
    assert failure.value.segments == segments


@pytest.mark.parametrize("value", ["D❄️S❄️T❄️SELECT❄️yes❄️R1", "D|S|T|SELECT|1"])
def test_decode_invalid_grant_option(value) -> None:
    with pytest.raises(MalformedIdentifier, match="with_grant_option"):
        decode(value)


def test_with_roles_keeps_identity() -> None:
    grant_id = GrantIdentifier("D", "S", "T", "SELECT", True, frozenset({"A"}))
    updated = grant_id.with_roles(["B", "C"])
    assert updated.roles == {"B", "C"}
    assert updated.with_roles(["A"]) == grant_id
