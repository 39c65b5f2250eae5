"""
Constants and default configuration values used across the equinode codebase.
"""

# Port window the node image is permitted to publish (inclusive)
MIN_ALLOWED_PORT = 18081
MAX_ALLOWED_PORT = 18200

# Two ports per node inside the 16-bit port space
PORT_CEILING = 65534
PORTS_PER_NODE = 2

# Request defaults
DEFAULT_START_AT = 1
DEFAULT_TO_CREATE = 1
DEFAULT_PORT_START_AT = 18150
DEFAULT_NODE_PREFIX = "Node"
DEFAULT_IMAGE = "ghcr.io/equilibriahorizon/equilibria-node:latest"

# Network join parameters passed to every node
DEFAULT_BOOTSTRAP_PEER = "84.247.143.210:18080"
DEFAULT_LOG_LEVEL = 3
DEFAULT_NETWORK_FLAG = "--testnet"

# Container layout
CONTAINER_DATA_PATH = "/data"
RESTART_POLICY = "unless-stopped"
LOOPBACK_ADDRESS = "127.0.0.1"

# Data directory layouts
DATA_LAYOUT_PER_NODE = "per-node"
DATA_LAYOUT_SHARED = "shared"
DATA_LAYOUTS = (DATA_LAYOUT_PER_NODE, DATA_LAYOUT_SHARED)
DEFAULT_DATA_ROOT = "."
DEFAULT_DATA_LAYOUT = DATA_LAYOUT_PER_NODE

# Config file lookup
CONFIG_FILE_NAME = "equinode.toml"
CONFIG_ENV_VAR = "EQUINODE_CONFIG"
CONFIG_SECTION = "equinode"

# Error messages
ERROR_PORT_CEILING = (
    "Port start {port_start} must allow two ports per node "
    "(last port {last_port} exceeds {ceiling})"
)
ERROR_NO_PORTS_IN_WINDOW = (
    "No available ports in range {min_port}-{max_port} for port start {port_start}"
)
ERROR_INVALID_PORT = "Port must be between 1 and 65535"
