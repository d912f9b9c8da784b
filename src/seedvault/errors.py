"""
Vault errors - one exception per failure kind.

Every error carries a stable ``code`` so callers at an outer surface
(CLI, HTTP wrapper) can map it to a status or message without
inspecting exception types. None of these are fatal to the process.
"""

from typing import Optional


class VaultError(Exception):
    """Base class for all vault failures."""

    code = "VAULT_ERROR"
    default_message = "Vault operation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code, "message": self.message}


class InvalidMnemonic(VaultError):
    code = "INVALID_MNEMONIC"
    default_message = "Invalid seed phrase (expected 12 or 24 valid words)"


class UnsupportedChain(VaultError):
    code = "UNSUPPORTED_CHAIN"
    default_message = "Unsupported chain"


class UnsupportedAddressFormat(VaultError):
    code = "UNSUPPORTED_ADDRESS_FORMAT"
    default_message = "Address format not supported for this chain"


class WrongPassword(VaultError):
    code = "WRONG_PASSWORD"
    default_message = "Authentication failed"


class CorruptEnvelope(VaultError):
    code = "CORRUPT_ENVELOPE"
    default_message = "Encrypted data is malformed"


class CorruptVault(VaultError):
    code = "CORRUPT_VAULT"
    default_message = "Vault file is unreadable"


class AlreadyExists(VaultError):
    code = "ALREADY_EXISTS"
    default_message = "Wallet already exists and is password protected"


class NotFound(VaultError):
    code = "NOT_FOUND"
    default_message = "Wallet not found"


class RecordChanged(VaultError):
    code = "RECORD_CHANGED"
    default_message = "Wallet was changed by another operation. Please try again."


class SetupNotFound(VaultError):
    code = "SETUP_NOT_FOUND"
    default_message = "Setup session not found. Please start wallet setup again."


class SetupExpired(VaultError):
    code = "SETUP_EXPIRED"
    default_message = "Setup session expired. Please start wallet setup again."


class MnemonicMismatch(VaultError):
    code = "MNEMONIC_MISMATCH"
    default_message = "Seed phrase does not match. Please try again."


class InvalidPassword(VaultError):
    code = "INVALID_PASSWORD"
    default_message = "Password does not meet requirements"

    def __init__(self, errors: Optional[list[str]] = None):
        self.errors = errors or []
        message = self.default_message
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class InvalidPrivateKey(VaultError):
    code = "INVALID_PRIVATE_KEY"
    default_message = "Invalid private key"


class InvalidToken(VaultError):
    code = "INVALID_TOKEN"
    default_message = "Invalid or expired token"


class RateLimited(VaultError):
    code = "RATE_LIMITED"
    default_message = "Too many unlock attempts. Try again later or unlock by address."


class PasswordOnlyUnlockDisabled(VaultError):
    code = "PASSWORD_ONLY_DISABLED"
    default_message = "Unlocking without an address is disabled"


# code -> user-facing message, for outer surfaces that only see codes
ERROR_MESSAGES = {
    cls.code: cls.default_message
    for cls in (
        VaultError,
        InvalidMnemonic,
        UnsupportedChain,
        UnsupportedAddressFormat,
        WrongPassword,
        CorruptEnvelope,
        CorruptVault,
        AlreadyExists,
        NotFound,
        RecordChanged,
        SetupNotFound,
        SetupExpired,
        MnemonicMismatch,
        InvalidPassword,
        InvalidPrivateKey,
        InvalidToken,
        RateLimited,
        PasswordOnlyUnlockDisabled,
    )
}


def get_error_message(code: str) -> str:
    """Get the user-facing message for an error code."""
    return ERROR_MESSAGES.get(code, VaultError.default_message)
