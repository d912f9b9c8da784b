"""
SeedVault Chains - Derivation table for supported networks.

One row per chain identifier: derivation path, address family and the
version bytes the address encoder needs. Adding a chain means adding a
row here (and an encoder case if it is a new family).
"""

from dataclasses import dataclass
from typing import Optional

from .errors import UnsupportedChain

# ============================================
# Address Families and Formats
# ============================================

FAMILY_EVM = "evm"
FAMILY_BITCOIN = "bitcoin"
FAMILY_TRON = "tron"
FAMILY_XRP = "xrp"

FORMAT_EVM = "evm"
FORMAT_P2PKH = "p2pkh"
FORMAT_P2SH_P2WPKH = "p2sh-p2wpkh"
FORMAT_P2WPKH = "p2wpkh"
FORMAT_TRON = "tron"
FORMAT_XRP = "xrp"

# All supported chains use secp256k1
CURVE_SECP256K1 = "secp256k1"

EVM_DERIVATION_PATH = "m/44'/60'/0'/0/0"


@dataclass(frozen=True)
class ChainSpec:
    """Configuration for a supported chain."""
    name: str
    display_name: str
    symbol: str
    family: str
    derivation_path: str
    address_formats: tuple[str, ...]    # First entry is the default
    curve: str = CURVE_SECP256K1
    chain_id: Optional[int] = None      # EVM chain id
    p2pkh_version: Optional[int] = None
    p2sh_version: Optional[int] = None
    wif_version: Optional[int] = None
    bech32_hrp: Optional[str] = None
    is_testnet: bool = False

    @property
    def default_format(self) -> str:
        return self.address_formats[0]

    def supports_format(self, address_format: str) -> bool:
        return address_format in self.address_formats


def _evm(name: str, display_name: str, symbol: str, chain_id: int) -> ChainSpec:
    return ChainSpec(
        name=name,
        display_name=display_name,
        symbol=symbol,
        family=FAMILY_EVM,
        derivation_path=EVM_DERIVATION_PATH,
        address_formats=(FORMAT_EVM,),
        chain_id=chain_id,
    )


# ============================================
# Chain Table
# ============================================

CHAINS: dict[str, ChainSpec] = {
    # EVM networks share one key (coin type 60)
    "ethereum": _evm("ethereum", "Ethereum", "ETH", 1),
    "bsc": _evm("bsc", "BNB Smart Chain", "BNB", 56),
    "polygon": _evm("polygon", "Polygon", "MATIC", 137),
    "arbitrum": _evm("arbitrum", "Arbitrum One", "ETH", 42161),
    "optimism": _evm("optimism", "Optimism", "ETH", 10),
    "avalanche": _evm("avalanche", "Avalanche C-Chain", "AVAX", 43114),
    "fantom": _evm("fantom", "Fantom Opera", "FTM", 250),

    # Bitcoin family
    "bitcoin": ChainSpec(
        name="bitcoin",
        display_name="Bitcoin",
        symbol="BTC",
        family=FAMILY_BITCOIN,
        derivation_path="m/84'/0'/0'/0/0",
        address_formats=(FORMAT_P2WPKH, FORMAT_P2SH_P2WPKH, FORMAT_P2PKH),
        p2pkh_version=0x00,
        p2sh_version=0x05,
        wif_version=0x80,
        bech32_hrp="bc",
    ),
    "litecoin": ChainSpec(
        name="litecoin",
        display_name="Litecoin",
        symbol="LTC",
        family=FAMILY_BITCOIN,
        derivation_path="m/84'/2'/0'/0/0",
        address_formats=(FORMAT_P2WPKH, FORMAT_P2SH_P2WPKH, FORMAT_P2PKH),
        p2pkh_version=0x30,
        p2sh_version=0x32,
        wif_version=0xB0,
        bech32_hrp="ltc",
    ),
    # Dogecoin has no SegWit: legacy P2PKH only
    "dogecoin": ChainSpec(
        name="dogecoin",
        display_name="Dogecoin",
        symbol="DOGE",
        family=FAMILY_BITCOIN,
        derivation_path="m/44'/3'/0'/0/0",
        address_formats=(FORMAT_P2PKH,),
        p2pkh_version=0x1E,
        p2sh_version=0x16,
        wif_version=0x9E,
    ),

    "tron": ChainSpec(
        name="tron",
        display_name="Tron",
        symbol="TRX",
        family=FAMILY_TRON,
        derivation_path="m/44'/195'/0'/0/0",
        address_formats=(FORMAT_TRON,),
        p2pkh_version=0x41,
    ),
    "xrp": ChainSpec(
        name="xrp",
        display_name="XRP Ledger",
        symbol="XRP",
        family=FAMILY_XRP,
        derivation_path="m/44'/144'/0'/0/0",
        address_formats=(FORMAT_XRP,),
        p2pkh_version=0x00,
    ),
}

# Default chain for new wallets
DEFAULT_CHAIN = "ethereum"


# ============================================
# Utility Functions
# ============================================

def get_chain(name: str) -> ChainSpec:
    """
    Get chain config by identifier (case-insensitive).

    Raises:
        UnsupportedChain: If the identifier is not registered
    """
    if not isinstance(name, str):
        raise UnsupportedChain(f"Unsupported chain: {name!r}")
    spec = CHAINS.get(name.strip().lower())
    if spec is None:
        raise UnsupportedChain(f"Unsupported chain: {name}")
    return spec


def is_supported_chain(name: str) -> bool:
    """Check whether a chain identifier is registered."""
    try:
        get_chain(name)
        return True
    except UnsupportedChain:
        return False


def list_chains(family: Optional[str] = None) -> list[ChainSpec]:
    """All registered chains, optionally filtered by family."""
    return [c for c in CHAINS.values() if family is None or c.family == family]


def get_chain_by_id(chain_id: int) -> Optional[ChainSpec]:
    """Get an EVM chain config by its numeric chain id."""
    for chain in CHAINS.values():
        if chain.chain_id == chain_id:
            return chain
    return None
