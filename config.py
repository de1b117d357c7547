"""全局配置，提供链与网络枚举、派生路径模板、RPC 预设与用户设置文件路径。"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple


class ChainType(str, Enum):
    """链类型枚举，A 链为以太坊（secp256k1），B 链为 Solana（ed25519）。"""

    ETHEREUM = "ethereum"
    SOLANA = "solana"


class Curve(str, Enum):
    """密钥所用曲线。"""

    SECP256K1 = "secp256k1"
    ED25519 = "ed25519"


class Network(str, Enum):
    """余额查询所用网络，仅影响 BalanceOracle，与密钥派生无关。"""

    MAINNET = "mainnet"
    DEVNET = "devnet"


@dataclass(frozen=True)
class RpcEndpoint:
    """单个 JSON-RPC 端点配置。"""

    chain_type: ChainType
    network: Network
    rpc_url: str
    decimals: int


# BIP44 派生路径模板，{index} 为账户序号
DERIVATION_PATH_TEMPLATE_ETH = "m/44'/60'/0'/0/{index}"
# Solana 采用全硬化路径（SLIP-0010 ed25519 不支持非硬化）
DERIVATION_PATH_TEMPLATE_SOL = "m/44'/501'/{index}'/0'"

# BIP32 硬化偏移量，序号必须小于此值
HARDENED_OFFSET = 0x80000000

# 助记词设置
MNEMONIC_LANGUAGE = "english"
VALID_WORD_COUNTS: Tuple[int, ...] = (12, 24)
DEFAULT_WORD_COUNT = 12
WORD_COUNT_TO_STRENGTH: Dict[int, int] = {12: 128, 24: 256}

# 余额显示：固定 4 位小数，失败时显示占位符
BALANCE_DECIMAL_PLACES = 4
UNKNOWN_BALANCE = "--"

ETH_DECIMALS = 18
SOL_DECIMALS = 9

RPC_TIMEOUT_SECONDS = 10.0

# 预设 RPC 端点，按 (链, 网络) 索引
RPC_ENDPOINTS: Dict[Tuple[ChainType, Network], RpcEndpoint] = {
    (ChainType.ETHEREUM, Network.MAINNET): RpcEndpoint(
        chain_type=ChainType.ETHEREUM,
        network=Network.MAINNET,
        rpc_url="https://rpc.ankr.com/eth",
        decimals=ETH_DECIMALS,
    ),
    (ChainType.ETHEREUM, Network.DEVNET): RpcEndpoint(
        chain_type=ChainType.ETHEREUM,
        network=Network.DEVNET,
        rpc_url="https://rpc.ankr.com/eth_sepolia",
        decimals=ETH_DECIMALS,
    ),
    (ChainType.SOLANA, Network.MAINNET): RpcEndpoint(
        chain_type=ChainType.SOLANA,
        network=Network.MAINNET,
        rpc_url="https://api.mainnet-beta.solana.com",
        decimals=SOL_DECIMALS,
    ),
    (ChainType.SOLANA, Network.DEVNET): RpcEndpoint(
        chain_type=ChainType.SOLANA,
        network=Network.DEVNET,
        rpc_url="https://api.devnet.solana.com",
        decimals=SOL_DECIMALS,
    ),
}

# 主题、默认网络与设置存储位置（仅保存非敏感偏好）
DEFAULT_THEME = "light"
DEFAULT_NETWORK = Network.DEVNET
USER_SETTINGS_FILE = Path("user_settings.json")

# 日志输出
LOG_DIR = Path("logs")
LOG_FILE_PATTERN = "zent_{time}.log"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "7 days"
