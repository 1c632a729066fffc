import base64
from decimal import Decimal
import pytest
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from core.errors import InvalidAmount, InvalidSenderAddress, MissingAmount
from core.utils import (
    build_transfer_transaction,
    decode_transfer_transaction,
    format_amount,
    parse_amount,
    parse_sender_address,
    serialize_unsigned,
    to_lamports,
)


@pytest.mark.parametrize(
    "amount, lamports",
    [
        ("0.01", 10_000_000),
        ("0.1", 100_000_000),
        ("1", 1_000_000_000),
        ("0.0000000005", 1),  # half a lamport rounds away from zero
        ("0.0000000014", 1),
        ("2.0000000015", 2_000_000_002),
    ],
)
def test_to_lamports(amount, lamports):
    assert to_lamports(parse_amount(amount)) == lamports


def test_to_lamports_rejects_dust_and_overflow():
    with pytest.raises(InvalidAmount):
        to_lamports(Decimal("0.0000000004"))
    with pytest.raises(InvalidAmount):
        to_lamports(Decimal("20000000000"))


@pytest.mark.parametrize("value", [None, "", "   ", "{amount}"])
def test_parse_amount_missing(value):
    with pytest.raises(MissingAmount):
        parse_amount(value)


@pytest.mark.parametrize("value", ["abc", "1.2.3", "NaN", "Infinity", "-0.5", "0"])
def test_parse_amount_invalid(value):
    with pytest.raises(InvalidAmount):
        parse_amount(value)


def test_format_amount():
    assert format_amount(Decimal("0.010")) == "0.01"
    assert format_amount(Decimal("1E+2")) == "100"


def test_parse_sender_address():
    key = Pubkey.new_unique()
    assert parse_sender_address(f" {key} ") == key

    for bad in [None, 42, "", "abc", str(SYSTEM_PROGRAM_ID)]:
        with pytest.raises(InvalidSenderAddress):
            parse_sender_address(bad)


def test_serialized_transaction_is_unsigned():
    sender, recipient = Pubkey.new_unique(), Pubkey.new_unique()
    blockhash = Hash.new_unique()
    encoded = serialize_unsigned(build_transfer_transaction(sender, recipient, 10_000_000, blockhash))

    raw = base64.b64decode(encoded)
    # One signature slot (compact length 1) holding 64 zero bytes
    assert raw[0] == 1
    assert raw[1:65] == bytes(64)

    assert decode_transfer_transaction(encoded) == {
        "sender": str(sender),
        "recipient": str(recipient),
        "lamports": 10_000_000,
        "fee_payer": str(sender),
        "blockhash": str(blockhash),
        "signed": False,
    }


def test_decode_rejects_garbage():
    with pytest.raises(ValueError):
        decode_transfer_transaction("not base64!")


@pytest.mark.parametrize("value", ["1e20", "100000000000000000000", "1E+999999999", "18446744073.709551616"])
def test_parse_amount_rejects_u64_overflow(value):
    with pytest.raises(InvalidAmount):
        parse_amount(value)


def test_to_lamports_rejects_unrepresentable_amounts():
    with pytest.raises(InvalidAmount):
        to_lamports(Decimal("1E+999999999"))
    assert to_lamports(parse_amount("18446744073.709551615")) == 2**64 - 1
