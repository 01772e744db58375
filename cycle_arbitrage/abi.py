"""
Minimal contract ABIs used by the engine.
"""

# Multicall3 tryAggregate (non-reverting batch)
MULTICALL3_ABI = [
    {
        "inputs": [
            {"name": "requireSuccess", "type": "bool"},
            {
                "components": [
                    {"name": "target", "type": "address"},
                    {"name": "callData", "type": "bytes"},
                ],
                "name": "calls",
                "type": "tuple[]",
            },
        ],
        "name": "tryAggregate",
        "outputs": [
            {
                "components": [
                    {"name": "success", "type": "bool"},
                    {"name": "returnData", "type": "bytes"},
                ],
                "name": "returnData",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

# Execution contract entry point for a strike
EXECUTE_CYCLE_SIGNATURE = "executeCycle(address[],bool[],uint256,uint256)"
EXECUTE_CYCLE_ARG_TYPES = ["address[]", "bool[]", "uint256", "uint256"]

# Uniswap V2 pair getReserves()
GET_RESERVES_SELECTOR = bytes.fromhex("0902f1ac")
GET_RESERVES_OUTPUT_TYPES = ["uint112", "uint112", "uint32"]
