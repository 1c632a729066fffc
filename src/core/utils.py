import base64
import binascii
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow

from loguru import logger
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import TransferParams, decode_transfer, transfer
from solders.transaction import Transaction

from core.errors import InvalidAmount, InvalidSenderAddress, MissingAmount, SerializationFailed

LAMPORTS_PER_SOL = 1_000_000_000
MAX_LAMPORTS = 2**64 - 1
MAX_SOL = Decimal(MAX_LAMPORTS) / LAMPORTS_PER_SOL
AMOUNT_PLACEHOLDER = "{amount}"


def parse_sender_address(account) -> Pubkey:
    """
    Parse the base58 sender address from the request body.

    :param account: The ``account`` field of the POST body

    :return: The sender public key
    """
    if not isinstance(account, str) or not account.strip():
        raise InvalidSenderAddress()
    try:
        sender = Pubkey.from_string(account.strip())
    except (ValueError, TypeError) as exc:
        raise InvalidSenderAddress() from exc
    if sender == SYSTEM_PROGRAM_ID:
        raise InvalidSenderAddress()
    return sender


def parse_amount(amount_str: str | None) -> Decimal:
    """Parse the ``amount`` query parameter as a strictly positive SOL amount."""
    if amount_str is None or not amount_str.strip() or amount_str.strip() == AMOUNT_PLACEHOLDER:
        raise MissingAmount()
    try:
        amount = Decimal(amount_str.strip())
    except InvalidOperation as exc:
        raise InvalidAmount() from exc
    if not amount.is_finite() or amount <= 0 or amount > MAX_SOL:
        raise InvalidAmount()
    return amount


def to_lamports(amount: Decimal) -> int:
    """
    Convert SOL to lamports, rounding half away from zero.

    :param amount: The amount in SOL

    :return: The amount in lamports
    """
    try:
        lamports = int((amount * LAMPORTS_PER_SOL).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except (InvalidOperation, Overflow) as exc:
        raise InvalidAmount() from exc
    if lamports <= 0 or lamports > MAX_LAMPORTS:
        raise InvalidAmount()
    return lamports


def format_amount(amount: Decimal) -> str:
    # 0.010 -> "0.01", 1E+2 -> "100"
    return format(amount.normalize(), "f")


def build_transfer_transaction(sender: Pubkey, recipient: Pubkey, lamports: int, blockhash: Hash) -> Transaction:
    """
    Build an unsigned single-instruction transfer paid for by the sender.

    :param sender: The account the lamports are moved from, also the fee payer
    :param recipient: The account receiving the tip
    :param lamports: The amount to move
    :param blockhash: Recent blockhash attached to the message

    :return: The unsigned transaction
    """
    instruction = transfer(TransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=lamports))
    message = Message.new_with_blockhash([instruction], sender, blockhash)
    return Transaction.new_unsigned(message)


def serialize_unsigned(transaction: Transaction) -> str:
    """Serialize without signing or verifying signatures and encode as base64."""
    try:
        raw_bytes = bytes(transaction)
    except Exception as exc:
        logger.error(f"Failed to serialize transaction: {exc}")
        raise SerializationFailed() from exc
    return base64.b64encode(raw_bytes).decode("utf-8")


def decode_transfer_transaction(encoded: str) -> dict:
    """
    Decode a base64 transaction produced by :func:`serialize_unsigned`.

    :param encoded: The base64 transaction blob

    :return: dict with sender, recipient, lamports, fee_payer, blockhash and signed
    """
    try:
        transaction = Transaction.from_bytes(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Not a valid base64 transaction: {exc}") from exc

    message = transaction.message
    if len(message.instructions) != 1:
        raise ValueError(f"Expected a single instruction, found {len(message.instructions)}")

    keys = message.account_keys
    header = message.header
    num_signed = header.num_required_signatures

    def is_writable(index: int) -> bool:
        if index < num_signed:
            return index < num_signed - header.num_readonly_signed_accounts
        return index < len(keys) - header.num_readonly_unsigned_accounts

    compiled = message.instructions[0]
    accounts = [
        AccountMeta(pubkey=keys[i], is_signer=i < num_signed, is_writable=is_writable(i))
        for i in compiled.accounts
    ]
    instruction = Instruction(keys[compiled.program_id_index], bytes(compiled.data), accounts)
    if instruction.program_id != SYSTEM_PROGRAM_ID:
        raise ValueError(f"Not a system program instruction: {instruction.program_id}")
    params = decode_transfer(instruction)

    return {
        "sender": str(params["from_pubkey"]),
        "recipient": str(params["to_pubkey"]),
        "lamports": params["lamports"],
        "fee_payer": str(keys[0]),
        "blockhash": str(message.recent_blockhash),
        "signed": any(signature != Signature.default() for signature in transaction.signatures),
    }
