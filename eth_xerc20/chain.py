"""Chain specific helpers."""

#: Manually maintained shorthand names for different EVM chains
CHAIN_NAMES = {
    1: "Ethereum",
    10: "Optimism",
    56: "Binance",
    100: "Gnosis",
    137: "Polygon",
    8453: "Base",
    42161: "Arbitrum",
    43114: "Avalanche",
    421614: "Arbitrum_Sepolia",
    11155111: "Sepolia",
}


def get_chain_name(chain_id: int) -> str:
    """Get chain name.

    :return:
        Human readable name, or "Unknown chain X"
    """
    return CHAIN_NAMES.get(chain_id, f"Unknown chain {chain_id}")
