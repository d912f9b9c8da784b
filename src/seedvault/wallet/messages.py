"""
Message signing - EIP-191 personal messages for EVM wallets.

Lets a caller prove control of an unlocked EVM address, and lets a
server check such a proof without touching the vault.
"""

import logging

from eth_account import Account
from eth_account.messages import encode_defunct

from .keys import keypair_from_private_key

logger = logging.getLogger(__name__)


def sign_message(private_key: str | bytes, message: str | bytes) -> str:
    """
    Sign a message with an EVM private key.

    Returns: 0x-prefixed 65-byte signature (r + s + v)
    """
    keypair = keypair_from_private_key(private_key)

    if isinstance(message, str):
        signable = encode_defunct(text=message)
    else:
        signable = encode_defunct(primitive=message)

    signed = Account.sign_message(signable, private_key=keypair.private_key)
    return "0x" + bytes(signed.signature).hex()


def recover_signer(message: str | bytes, signature: str | bytes) -> str:
    """Recover the signing address (checksummed) from a signed message."""
    if isinstance(message, str):
        signable = encode_defunct(text=message)
    else:
        signable = encode_defunct(primitive=message)
    return Account.recover_message(signable, signature=signature)


def verify_message(message: str | bytes, signature: str | bytes, expected_address: str) -> bool:
    """
    Check that message was signed by expected_address.

    Address comparison is case-insensitive. Malformed signatures
    return False rather than raising.
    """
    try:
        signer = recover_signer(message, signature)
    except Exception as e:
        logger.debug(f"Signature recovery failed: {e}")
        return False
    return signer.lower() == expected_address.lower()
