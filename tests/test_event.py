import json

import pytest

from comrelay.event import ArgType, Event

PLAIN = [ArgType("address", False), ArgType("address", False), ArgType("uint256", False)]
FROM_TO_INDEXED = [ArgType("address", True), ArgType("address", True), ArgType("uint256", False)]
TRANSFER_TOPIC0 = "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


@pytest.mark.parametrize(
    "signature, names, types",
    [
        ("Transfer(address from, address to, uint256 value)", ["from", "to", "value"], PLAIN),
        ("Transfer(address from,address to,uint256 value)", ["from", "to", "value"], PLAIN),
        (
            "Transfer(address indexed from,address indexed to,uint256 value)",
            ["from", "to", "value"],
            FROM_TO_INDEXED,
        ),
        (
            "Transfer (index_topic_1 address from, index_topic_2 address to, uint256 value)",
            ["from", "to", "value"],
            FROM_TO_INDEXED,
        ),
        ("Transfer(address,address,uint256)", ["0", "1", "2"], PLAIN),
    ],
)
def test_parse_event_signature(signature, names, types):
    name, arg_names, arg_types = Event(event_signature=signature).parse_event_signature()
    assert name == "Transfer"
    assert arg_names == names
    assert arg_types == types


@pytest.mark.parametrize(
    "signature, names, types",
    [
        (
            "Transfer(address indexed from, address indexed to, uint256 value)",
            ["from", "to", "value"],
            FROM_TO_INDEXED,
        ),
        (
            "Transfer(address indexed from,address indexed to,uint256 value)",
            ["from", "to", "value"],
            FROM_TO_INDEXED,
        ),
        ("Transfer(address indexed,address indexed,uint256)", ["0", "1", "2"], FROM_TO_INDEXED),
        (
            "Transfer(address,address indexed,uint256 indexed)",
            ["0", "1", "2"],
            [ArgType("address", False), ArgType("address", True), ArgType("uint256", True)],
        ),
        (
            "Transfer(uint256,address indexed,address indexed)",
            ["0", "1", "2"],
            [ArgType("uint256", False), ArgType("address", True), ArgType("address", True)],
        ),
    ],
)
def test_parse_indexed_event_signature(signature, names, types):
    name, arg_names, arg_types = Event(event_signature=signature).parse_event_signature()
    assert name == "Transfer"
    assert arg_names == names
    assert arg_types == types


@pytest.mark.parametrize("signature", ["", "Transfer", "(address a)", "Transfer()"])
def test_parse_unusable_signatures_give_no_arguments(signature):
    _, arg_names, arg_types = Event(event_signature=signature).parse_event_signature()
    assert arg_names == []
    assert arg_types == []


@pytest.mark.parametrize(
    "signature, expected",
    [
        ("Transfer(address,address,uint256)", TRANSFER_TOPIC0),
        (
            "Approval(address,address,uint256)",
            "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925",
        ),
        ("Transfer(address from, address to, uint256 value)", TRANSFER_TOPIC0),
        ("Transfer(address indexed from, address indexed to, uint256 value)", TRANSFER_TOPIC0),
        (
            "Transfer (index_topic_1 address from, index_topic_2 address to, uint256 value)",
            TRANSFER_TOPIC0,
        ),
        ("", "0000000000000000000000000000000000000000000000000000000000000000"),
    ],
)
def test_get_topic0_from_event_signature(signature, expected):
    topic0 = Event(event_signature=signature).get_topic0_from_event_signature()
    assert topic0 == bytes.fromhex(expected)


@pytest.mark.parametrize(
    "signature, expected",
    [
        (
            "Transfer(address from, address to, uint256 value)",
            '[{"name":"Transfer","type":"event","inputs":[{"name":"from","type":"address","indexed":false},'
            '{"name":"to","type":"address","indexed":false},{"name":"value","type":"uint256","indexed":false}]}]',
        ),
        (
            "Transfer(address indexed from, address indexed to, uint256 value)",
            '[{"name":"Transfer","type":"event","inputs":[{"name":"from","type":"address","indexed":true},'
            '{"name":"to","type":"address","indexed":true},{"name":"value","type":"uint256","indexed":false}]}]',
        ),
        (
            "Transfer (index_topic_1 address from, index_topic_2 address to, uint256 value)",
            '[{"name":"Transfer","type":"event","inputs":[{"name":"from","type":"address","indexed":true},'
            '{"name":"to","type":"address","indexed":true},{"name":"value","type":"uint256","indexed":false}]}]',
        ),
        (
            "Transfer(address,address,uint256)",
            '[{"name":"Transfer","type":"event","inputs":[{"name":"0","type":"address","indexed":false},'
            '{"name":"1","type":"address","indexed":false},{"name":"2","type":"uint256","indexed":false}]}]',
        ),
    ],
)
def test_construct_abi_from_event_signature(signature, expected):
    abi = Event(event_signature=signature).construct_abi_from_event_signature()
    assert json.loads(abi) == json.loads(expected)


@pytest.mark.parametrize("signature", ["", "Transfer", "Transfer()"])
def test_construct_abi_rejects_bad_signatures(signature):
    with pytest.raises(ValueError, match="event name is required"):
        Event(event_signature=signature).construct_abi_from_event_signature()


def test_construct_abi_valid_signature_is_not_empty():
    abi = Event(
        event_signature="Transfer(address from, address to, uint256 value)"
    ).construct_abi_from_event_signature()
    assert len(abi) > 0
    assert json.loads(abi)[0]["name"] == "Transfer"


@pytest.mark.parametrize(
    "signature, data, expected",
    [
        (
            "Transfer(address from, address to, uint256 value)",
            {"topic": "0x...", "from": "0x1234...", "to": "0x5678...", "value": "1000000000000000000"},
            True,
        ),
        (
            "Transfer(address,address,uint256)",
            {"topic": "0x...", "0": "0x1234...", "1": "0x5678...", "2": "1000000000000000000"},
            True,
        ),
        (
            "Transfer(address from, address to, uint256 value)",
            {"from": "0x1234...", "to": "0x5678...", "value": "1000000000000000000"},
            False,
        ),
        (
            "Transfer(address from, address to, uint256 value)",
            {
                "topic": "0x...",
                "from": "0x1234...",
                "to": "0x5678...",
                "value": "1000000000000000000",
                "extra": "extra field",
            },
            False,
        ),
        (
            "Transfer(address from, address to, uint256 value)",
            {"topic": "0x...", "from": "0x1234...", "to": "0x5678..."},
            False,
        ),
    ],
)
def test_is_valid_data(signature, data, expected):
    assert Event(event_signature=signature).is_valid_data(data) is expected