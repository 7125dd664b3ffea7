"""
Configuration for the resolution passes.

Defines file conventions, reserved names, built-in type tables and
inheritance limits.
"""

# Import closure conventions
SOURCE_EXTENSION = ".sol"
REMAPPINGS_FILE = "remappings.txt"
DEPENDENCY_DIR = "node_modules"

# Pseudo-contract holding file-level declarations. Not a valid Solidity
# identifier, so it can never collide with a declared contract.
GLOBAL_CONTRACT = "0_global"

# Member names of functions without a source-level name
CONSTRUCTOR_NAME = "<Constructor>"
FALLBACK_NAME = "<Fallback>"
RECEIVE_NAME = "<Receive Ether>"

SYNTHETIC_MEMBERS = {CONSTRUCTOR_NAME, FALLBACK_NAME, RECEIVE_NAME}

# Cluster label suffixes by contract kind
CONTRACT_KIND_SUFFIX = {
    "interface": "  (iface)",
    "library": "  (lib)",
}

# Type of each built-in special variable, keyed by "<object>.<member>"
SPECIAL_VARIABLE_TYPES = {
    "msg.data": "bytes",
    "msg.sender": "address",
    "msg.sig": "bytes4",
    "msg.value": "uint256",
    "tx.gasprice": "uint256",
    "tx.origin": "address",
    "block.basefee": "uint256",
    "block.blobbasefee": "uint256",
    "block.chainid": "uint256",
    "block.coinbase": "address",
    "block.difficulty": "uint256",
    "block.gaslimit": "uint256",
    "block.number": "uint256",
    "block.prevrandao": "uint256",
    "block.timestamp": "uint256",
    "now": "uint256",
}

# Built-in members of the global `abi` object
ABI_OBJECT = "abi"
ABI_MEMBERS = {
    "encode",
    "encodePacked",
    "encodeWithSelector",
    "encodeWithSignature",
    "encodeCall",
    "decode",
}

# Built-in members of storage arrays and `bytes`
ARRAY_MEMBERS = {"push", "pop"}

# Casts whose `.call` takes a signature string rather than a member
ADDRESS_CASTS = {"address", "address payable", "payable"}

# Elementary type aliases and their canonical spelling
CANONICAL_TYPES = {
    "uint": "uint256",
    "int": "int256",
    "fixed": "fixed128x18",
    "ufixed": "ufixed128x18",
}

# Wildcard key of using-for tables (`using L for *`)
ANY_TYPE = "*"

# Inheritance linearization settings
INHERITANCE_CONFIG = {
    "max_mro_depth": 50,         # Maximum inheritance depth before giving up
}


def canonical_type(type_name: str) -> str:
    """Map `uint`, `int`, `fixed` and `ufixed` to their full spelling."""
    return CANONICAL_TYPES.get(type_name, type_name)
