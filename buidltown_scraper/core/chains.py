"""
Chain normalization.

Maps free-text chain names and aliases onto a fixed table of canonical
chains. EVM chains use their EIP-155 chain id; non-EVM chains use
internal ids from 900 upwards.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional


@dataclass(frozen=True)
class Chain:
    """Canonical chain definition."""
    id: int
    name: str
    symbol: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    evm_compatible: bool = True


CHAINS: tuple[Chain, ...] = (
    # Layer 1 - EVM
    Chain(1, "Ethereum", "ETH", ("ethereum", "eth", "ethereum mainnet", "mainnet")),
    Chain(56, "BNB Chain", "BNB", ("bnb", "bsc", "binance", "binance smart chain", "bnb chain", "opbnb")),
    Chain(137, "Polygon", "MATIC", ("polygon", "matic", "polygon pos", "polygon mainnet")),
    Chain(43114, "Avalanche", "AVAX", ("avalanche", "avax", "avalanche c-chain")),
    Chain(250, "Fantom", "FTM", ("fantom", "ftm", "sonic")),
    Chain(42220, "Celo", "CELO", ("celo",)),
    Chain(100, "Gnosis", "XDAI", ("gnosis", "gnosis chain", "xdai")),
    Chain(25, "Cronos", "CRO", ("cronos", "cro")),
    Chain(1284, "Moonbeam", "GLMR", ("moonbeam", "glmr")),
    Chain(7000, "ZetaChain", "ZETA", ("zetachain", "zeta")),
    # Layer 1 - Non-EVM
    Chain(900, "Solana", "SOL", ("solana", "sol"), evm_compatible=False),
    Chain(901, "NEAR", "NEAR", ("near", "near protocol"), evm_compatible=False),
    Chain(902, "Sui", "SUI", ("sui",), evm_compatible=False),
    Chain(903, "Aptos", "APT", ("aptos", "apt"), evm_compatible=False),
    Chain(904, "Cosmos Hub", "ATOM", ("cosmos", "atom", "cosmos hub"), evm_compatible=False),
    Chain(905, "Cardano", "ADA", ("cardano", "ada"), evm_compatible=False),
    Chain(906, "Polkadot", "DOT", ("polkadot", "dot", "substrate"), evm_compatible=False),
    Chain(907, "Starknet", "STRK", ("starknet", "strk", "starkware"), evm_compatible=False),
    Chain(908, "TON", "TON", ("ton", "the open network", "telegram open network"), evm_compatible=False),
    Chain(909, "Sei", "SEI", ("sei", "sei network"), evm_compatible=False),
    Chain(910, "Injective", "INJ", ("injective", "inj"), evm_compatible=False),
    Chain(911, "Flow", "FLOW", ("flow",), evm_compatible=False),
    Chain(912, "Hedera", "HBAR", ("hedera", "hbar", "hedera hashgraph"), evm_compatible=False),
    Chain(913, "Algorand", "ALGO", ("algorand", "algo"), evm_compatible=False),
    Chain(914, "Bitcoin", "BTC", ("bitcoin", "btc"), evm_compatible=False),
    # Layer 2
    Chain(10, "Optimism", "OP", ("optimism", "op", "op mainnet")),
    Chain(8453, "Base", "ETH", ("base", "base mainnet", "coinbase")),
    Chain(42161, "Arbitrum One", "ETH", ("arbitrum", "arb", "arbitrum one")),
    Chain(42170, "Arbitrum Nova", "ETH", ("arbitrum nova", "nova")),
    Chain(324, "zkSync Era", "ETH", ("zksync", "zksync era", "zk sync")),
    Chain(59144, "Linea", "ETH", ("linea", "linea mainnet")),
    Chain(534352, "Scroll", "ETH", ("scroll",)),
    Chain(1101, "Polygon zkEVM", "ETH", ("polygon zkevm", "polygon hermez")),
    Chain(169, "Manta Pacific", "ETH", ("manta", "manta pacific", "manta network")),
    Chain(81457, "Blast", "ETH", ("blast",)),
    Chain(5000, "Mantle", "MNT", ("mantle", "mantle network")),
    Chain(34443, "Mode", "ETH", ("mode", "mode network")),
    Chain(1088, "Metis", "METIS", ("metis", "metis andromeda")),
    Chain(167000, "Taiko", "ETH", ("taiko",)),
)

CHAIN_BY_ID: dict[int, Chain] = {chain.id: chain for chain in CHAINS}

CHAIN_ALIAS_MAP: dict[str, int] = {
    alias.lower(): chain.id
    for chain in CHAINS
    for alias in (*chain.aliases, chain.name)
}

# Names searched for in prose. Short ambiguous aliases ("op", "sol", "base")
# are left out on purpose.
_TEXT_PATTERNS = [
    (re.compile(r"\bethereum\b", re.IGNORECASE), "Ethereum"),
    (re.compile(r"\bpolygon\b", re.IGNORECASE), "Polygon"),
    (re.compile(r"\barbitrum\b", re.IGNORECASE), "Arbitrum"),
    (re.compile(r"\boptimism\b", re.IGNORECASE), "Optimism"),
    (re.compile(r"\bbase\s+(?:chain|l2|network|mainnet)\b", re.IGNORECASE), "Base"),
    (re.compile(r"\bsolana\b", re.IGNORECASE), "Solana"),
    (re.compile(r"\bnear\s+protocol\b|\bnear\b(?=\s+(?:ecosystem|chain|blockchain))", re.IGNORECASE), "NEAR"),
    (re.compile(r"\bsui\b", re.IGNORECASE), "Sui"),
    (re.compile(r"\baptos\b", re.IGNORECASE), "Aptos"),
    (re.compile(r"\bzksync\b", re.IGNORECASE), "zkSync"),
    (re.compile(r"\blinea\b", re.IGNORECASE), "Linea"),
    (re.compile(r"\bscroll\s+(?:zkevm|chain|l2|network)\b", re.IGNORECASE), "Scroll"),
    (re.compile(r"\bblast\s+(?:l2|chain|network)\b", re.IGNORECASE), "Blast"),
    (re.compile(r"\bbnb\s*chain\b", re.IGNORECASE), "BNB Chain"),
    (re.compile(r"\bavalanche\b", re.IGNORECASE), "Avalanche"),
    (re.compile(r"\bstarknet\b", re.IGNORECASE), "Starknet"),
    (re.compile(r"\bpolkadot\b", re.IGNORECASE), "Polkadot"),
    (re.compile(r"\bcosmos\b", re.IGNORECASE), "Cosmos"),
    (re.compile(r"\bmantle\b", re.IGNORECASE), "Mantle"),
    (re.compile(r"\bstellar\b", re.IGNORECASE), "Stellar"),
    (re.compile(r"\bbitcoin\b", re.IGNORECASE), "Bitcoin"),
]


class NormalizedChains(NamedTuple):
    """Result of chain normalization."""
    chains: list[str]
    chain_ids: list[int]


def normalize_chain_name(raw_name: str) -> Optional[int]:
    """
    Look up the canonical id for a chain name or alias.

    Args:
        raw_name: Free-text chain name (any case, surrounding whitespace ok)

    Returns:
        Canonical chain id or None if the name is unknown
    """
    if not raw_name:
        return None
    return CHAIN_ALIAS_MAP.get(raw_name.strip().lower())


def normalize_chains(raw_names: Iterable[str]) -> NormalizedChains:
    """
    Normalize chain names to canonical display names and ids.

    Recognized names become the canonical display name and contribute
    their id. Unknown names are kept verbatim for later review and
    contribute no id. Input order is preserved and entries that resolve
    to the same chain are emitted once.

    Args:
        raw_names: Chain names as found upstream

    Returns:
        NormalizedChains(chains, chain_ids)
    """
    chains: list[str] = []
    chain_ids: list[int] = []
    seen_ids: set[int] = set()
    seen_unknown: set[str] = set()

    for raw in raw_names or []:
        if not raw or not raw.strip():
            continue

        chain_id = normalize_chain_name(raw)
        if chain_id is not None:
            if chain_id in seen_ids:
                continue
            seen_ids.add(chain_id)
            chains.append(CHAIN_BY_ID[chain_id].name)
            chain_ids.append(chain_id)
        else:
            folded = raw.strip().lower()
            if folded in seen_unknown:
                continue
            seen_unknown.add(folded)
            chains.append(raw)

    return NormalizedChains(chains, chain_ids)


def extract_chains_from_text(text: str) -> list[str]:
    """
    Find chain names mentioned in free text.

    Args:
        text: Description, tagline, tags joined together

    Returns:
        Chain names in table order, without duplicates
    """
    if not text:
        return []

    found: list[str] = []
    for pattern, name in _TEXT_PATTERNS:
        if pattern.search(text) and name not in found:
            found.append(name)
    return found
