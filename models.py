"""数据模型定义：助记词、链密钥对、钱包记录与金库值对象。"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from config import ChainType, Curve


class VaultState(str, Enum):
    """金库状态。"""

    EMPTY = "empty"
    ACTIVE = "active"


@dataclass(frozen=True)
class SeedPhrase:
    """已校验的助记词，创建后不可变；repr 不暴露单词。"""

    words: Tuple[str, ...] = field(repr=False)

    def __str__(self) -> str:
        return " ".join(self.words)

    def __len__(self) -> int:
        return len(self.words)

    @property
    def word_count(self) -> int:
        return len(self.words)


@dataclass(frozen=True)
class ChainKeypair:
    """单条链上的密钥对，按 (助记词, 序号) 确定性派生。"""

    address: str
    private_key: str = field(repr=False)
    public_key: str
    curve: Curve
    derivation_path: str


@dataclass(frozen=True)
class WalletRecord:
    """单个钱包记录，同时包含以太坊与 Solana 两条链的密钥对。"""

    id: str
    account_index: int
    ethereum: ChainKeypair
    solana: ChainKeypair

    def keypair(self, chain_type: ChainType) -> ChainKeypair:
        """按链类型取对应密钥对。"""
        if chain_type == ChainType.SOLANA:
            return self.solana
        return self.ethereum

    @property
    def label(self) -> str:
        """界面显示名，序号从 1 开始。"""
        return f"Wallet {self.account_index + 1}"


@dataclass(frozen=True)
class Vault:
    """金库值对象：要么无助记词无钱包，要么有助记词且至少一个钱包。"""

    seed_phrase: Optional[SeedPhrase] = None
    wallets: Tuple[WalletRecord, ...] = ()

    def __post_init__(self) -> None:
        if (self.seed_phrase is None) != (not self.wallets):
            raise ValueError("金库状态不一致：助记词与钱包必须同时存在或同时为空")
        indices = [w.account_index for w in self.wallets]
        if len(set(indices)) != len(indices):
            raise ValueError("钱包序号重复")
        ids = [w.id for w in self.wallets]
        if len(set(ids)) != len(ids):
            raise ValueError("钱包 id 重复")

    @classmethod
    def empty(cls) -> "Vault":
        return cls()

    @property
    def state(self) -> VaultState:
        return VaultState.EMPTY if self.seed_phrase is None else VaultState.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.state == VaultState.ACTIVE

    def find(self, wallet_id: str) -> Optional[WalletRecord]:
        """按 id 查找钱包记录。"""
        for wallet in self.wallets:
            if wallet.id == wallet_id:
                return wallet
        return None

    def next_account_index(self) -> int:
        """新钱包的序号：现有最大序号加一，删除不会重排序号。"""
        if not self.wallets:
            return 0
        return max(w.account_index for w in self.wallets) + 1
