"""RPC configuration."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Public full node endpoints
NETWORK_RPC_URLS = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
    "localnet": "http://127.0.0.1:9000",
}

DEFAULT_RPC_URL = NETWORK_RPC_URLS["mainnet"]


def resolve_rpc_url(url_or_network: str) -> str:
    """Map a network name to its endpoint; URLs pass through."""
    return NETWORK_RPC_URLS.get(url_or_network.lower(), url_or_network)


@dataclass
class RpcConfig:
    """Configuration for talking to a Sui full node."""
    rpc_url: str = DEFAULT_RPC_URL
    timeout: float = 30.0
    # Bag members processed at once; 1 keeps processing strictly sequential
    max_concurrency: int = 1

    def __post_init__(self):
        self.rpc_url = resolve_rpc_url(self.rpc_url)
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RpcConfig":
        """
        Build a config from SUI_RPC_URL, SUI_RPC_TIMEOUT and SUI_MAX_CONCURRENCY.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        return cls(
            rpc_url=env.get("SUI_RPC_URL", DEFAULT_RPC_URL),
            timeout=float(env.get("SUI_RPC_TIMEOUT", 30.0)),
            max_concurrency=int(env.get("SUI_MAX_CONCURRENCY", 1)),
        )
