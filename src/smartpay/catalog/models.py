"""Catalog models - immutable reference data for tokens and networks."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Token(BaseModel):
    """A payment or settlement token on one chain."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Catalog key, unique per symbol and chain")
    symbol: str = Field(description="Ticker symbol (ETH, USDC, ...)")
    name: str = Field(description="Display name")
    chain: str = Field(description="Chain identifier (ethereum, base, ...)")
    chain_id: int = Field(description="EVM chain id")
    usd: float = Field(gt=0, description="USD reference price")
    decimals: int = Field(ge=0, description="Decimal precision")
    contract: Optional[str] = Field(default=None, description="Contract address, None for native assets")


class Network(BaseModel):
    """Chain metadata used by fee, ETA and explorer resolution."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="EVM chain id")
    key: str = Field(description="Chain identifier")
    label: str = Field(description="Display label")
    native_symbol: str = Field(default="ETH", description="Symbol of the chain's native asset")
    gas_base_usd: float = Field(ge=0, description="Baseline gas cost in USD")
    latency_minutes: float = Field(ge=0, description="Nominal confirmation latency")
    reliability: float = Field(ge=0.0, le=1.0, description="Nominal reliability")
    explorer: str = Field(description="Block explorer transaction URL template")
    rpc_chain_id: Optional[int] = Field(default=None)
