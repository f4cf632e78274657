"""
Wallet Models

The payer's wallet as supplied by the caller. Wallets are read-only inputs
to both engines: neither quoting nor execution mutates balances, transport
maps, or addresses.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from smartpay.catalog.models import Network, Token


class WalletBalance(BaseModel):
    """One held asset balance."""

    model_config = ConfigDict(frozen=True)

    key: Optional[str] = Field(default=None, description="Catalog key hint")
    symbol: str = Field(description="Token symbol")
    chain: str = Field(description="Chain identifier")
    decimals: int = Field(ge=0, description="Token decimals")
    chain_id: int = Field(description="EVM chain id")
    amount: float = Field(ge=0, description="Held amount")


class Wallet(BaseModel):
    """
    Payer wallet.

    Transports are caller-supplied objects (wallet providers, RPC clients,
    custom adapters). `transports` is keyed by lower-case chain name or
    stringified chain id; `provider` is the bare fallback transport.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(default=None)
    connector_label: Optional[str] = Field(default=None)
    address: str = Field(default="", description="Payer address")
    chain: Optional[str] = Field(default=None)
    chain_id: Optional[int] = Field(default=None)
    balances: List[WalletBalance] = Field(default_factory=list)
    network: Optional[Network] = Field(default=None, description="Network metadata (explorer, ...)")
    provider: Any = Field(default=None, exclude=True)
    transports: Dict[str, Any] = Field(default_factory=dict, exclude=True)
    is_demo: bool = Field(default=False)


class Holding(BaseModel):
    """A wallet balance joined with its catalog token."""

    model_config = ConfigDict(frozen=True)

    balance: WalletBalance
    token: Token


class WalletContext(BaseModel):
    """Wallet balances resolved against the catalog, ready for routing."""

    model_config = ConfigDict(frozen=True)

    wallet: Wallet
    holdings: List[Holding] = Field(default_factory=list)
    token_catalog: List[Token] = Field(default_factory=list)
