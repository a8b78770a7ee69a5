import json

import pytest

from comrelay.legacylog import (
    LegacyLog,
    LegacyLogStatus,
    WSMessageDataType,
    WSMessageType,
    legacy_log_status_from_string,
    sorted_json_bytes,
)


def make_log(**kw):
    base = dict(
        hash="0xabc",
        tx_hash="0x1234",
        sender="0xSender",
        to="0xABCDEF",
        value=1500,
        data='{"topic":"Transfer","from":"0x1","amount":30}',
        status=LegacyLogStatus.SUCCESS,
    )
    base.update(kw)
    return LegacyLog(**base)


@pytest.mark.parametrize("name", ["sending", "pending", "success", "fail"])
def test_status_from_string(name):
    assert legacy_log_status_from_string(name).value == name


def test_status_unknown_raises():
    with pytest.raises(ValueError, match="unknown role: nope"):
        legacy_log_status_from_string("nope")


def test_sorted_json_bytes_object():
    assert sorted_json_bytes('{"b":1,"a":"x"}') == b'"a""x""b"1'


def test_sorted_json_bytes_non_object_is_raw():
    assert sorted_json_bytes("[1,2]") == b"[1,2]"
    assert sorted_json_bytes(None) is None


def test_unique_hash_ignores_key_order():
    a = make_log(data='{"x":1,"y":2}')
    b = make_log(data='{"y":2,"x":1}')
    assert a.generate_unique_hash("0x1") == b.generate_unique_hash("0x1")
    assert a.generate_unique_hash("0x1") != a.generate_unique_hash("0x2")
    assert len(a.generate_unique_hash("0x1")) == 66


def test_to_rounded():
    log = make_log()
    assert log.to_rounded(0) == 1500.0
    assert log.to_rounded(3) == 1.5


def test_update_copies_fields():
    target = LegacyLog()
    source = make_log()
    target.update(source)
    assert target.hash == source.hash
    assert target.value == source.value
    assert target.updated_at is not None and target.updated_at != source.updated_at


def test_pool_topic():
    log = make_log()
    assert log.get_pool_topic() == "0xABCDEF/Transfer".lower()
    assert make_log(data=None).get_pool_topic() is None
    assert make_log(data='{"topic":5}').get_pool_topic() is None


def test_to_json_round_trip():
    log = make_log()
    decoded = json.loads(log.to_json())
    assert decoded["data"]["topic"] == "Transfer"
    assert decoded["status"] == "success"
    assert decoded["created_at"] == "0001-01-01T00:00:00Z"


def test_to_json_invalid_data():
    assert make_log(data="{bad").to_json() is None


def test_ws_message():
    msg = make_log().to_ws_message(WSMessageType.NEW)
    assert msg.pool_id == make_log().get_pool_topic()
    assert msg.id == "0xabc"
    assert msg.data_type is WSMessageDataType.LOG
    assert msg.to_dict()["type"] == "new"
    assert make_log(data='{"a":1}').to_ws_message(WSMessageType.NEW) is None


def test_matches_query():
    log = make_log()
    assert log.matches_query("")
    assert log.matches_query("data.amount=30")
    assert log.matches_query("data.from=0x1&data.amount=99")
    assert not log.matches_query("data.amount=31")
    assert not log.matches_query("from=0x1")