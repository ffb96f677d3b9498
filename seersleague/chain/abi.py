"""
SeersLeague contract ABI.

Only the read functions and events the reader uses are declared.
"""

from typing import Any

SEERSLEAGUE_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getUserStats",
        "stateMutability": "view",
        "inputs": [{"internalType": "address", "name": "user", "type": "address"}],
        "outputs": [
            {
                "internalType": "struct SeersLeague.UserStats",
                "name": "",
                "type": "tuple",
                "components": [
                    {"internalType": "uint256", "name": "correctPredictions", "type": "uint256"},
                    {"internalType": "uint256", "name": "totalPredictions", "type": "uint256"},
                    {"internalType": "uint256", "name": "freePredictionsUsed", "type": "uint256"},
                    {"internalType": "uint256", "name": "currentStreak", "type": "uint256"},
                    {"internalType": "uint256", "name": "longestStreak", "type": "uint256"},
                ],
            }
        ],
    },
    {
        "type": "event",
        "name": "PredictionsSubmitted",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "user", "type": "address"},
            {"indexed": False, "internalType": "uint256[]", "name": "matchIds", "type": "uint256[]"},
            {"indexed": False, "internalType": "uint256", "name": "predictionsCount", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "freeUsed", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "feePaid", "type": "uint256"},
        ],
    },
    {
        "type": "event",
        "name": "ResultRecorded",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "user", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "matchId", "type": "uint256"},
            {"indexed": False, "internalType": "bool", "name": "correct", "type": "bool"},
        ],
    },
    {
        "type": "event",
        "name": "MatchRegistered",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "matchId", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "startTime", "type": "uint256"},
        ],
    },
]
