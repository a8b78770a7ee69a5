import json

import pytest

from comrelay.crypto import keccak256
from comrelay.userop import FUNC_SIG_SINGLE, UserOp


def sample():
    return UserOp(
        sender="0x480fbe37526226b6c6e2a7afa449cdf661939d2f",
        nonce=7,
        init_code=b"",
        call_data=b"\x01\x02",
        call_gas_limit=100,
        verification_gas_limit=200,
        pre_verification_gas=300,
        max_fee_per_gas=400,
        max_priority_fee_per_gas=500,
        paymaster_and_data=b"\xff",
        signature=b"\xaa\xbb",
    )


def test_func_sig_single():
    selector = keccak256(b"execute(address,uint256,bytes)")[:4]
    assert selector == bytes.fromhex("b61d27f6")
    assert FUNC_SIG_SINGLE == selector


def test_to_dict_format():
    d = sample().to_dict()
    assert d["sender"] == "0x480Fbe37526226b6c6E2a7AfA449cDf661939D2f"
    assert d["initCode"] == "0x"
    assert d["callData"] == "0x0102"
    assert UserOp(nonce=0).to_dict()["nonce"] == "0x0"


def test_json_round_trip():
    op = sample()
    back = UserOp.from_json(op.to_json())
    assert back.to_dict() == op.to_dict()
    assert back.nonce == op.nonce
    assert back.signature == op.signature


def test_invalid_fields_become_none():
    d = sample().to_dict()
    d["nonce"] = "0x007"
    d["callData"] = "123"
    del d["signature"]
    op = UserOp.from_dict(d)
    assert op.nonce is None
    assert op.call_data is None
    assert op.signature is None
    assert op.call_gas_limit == 100


def test_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        UserOp.from_json(json.dumps([1]))


def test_copy_is_independent():
    op = sample()
    dup = op.copy()
    assert dup == op
    dup.nonce = 99
    assert op.nonce == 7