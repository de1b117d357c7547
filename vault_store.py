"""金库状态机：纯函数状态转换 + 会话持有的串行化 VaultStore。

状态只有 EMPTY 与 ACTIVE：
    EMPTY  --create_vault-->  ACTIVE
    ACTIVE --clear_vault-->   EMPTY
    ACTIVE --add_wallet/delete_wallet--> ACTIVE

账户序号是派生路径的一部分，删除钱包不会重排序号，新钱包取现有最大序号加一。
"""

import threading
from typing import Optional, Tuple

from loguru import logger

from config import DEFAULT_WORD_COUNT
from derivation import derive_wallet
from exceptions import LastWalletError, VaultStateError, WalletNotFoundError
from models import SeedPhrase, Vault, VaultState, WalletRecord
from seed_manager import generate_seed_phrase, validate_seed_phrase


def _require_active(vault: Vault, operation: str) -> SeedPhrase:
    if vault.seed_phrase is None:
        raise VaultStateError(f"金库为空，无法执行 {operation}")
    return vault.seed_phrase


def create_vault(vault: Vault, seed_input: Optional[str] = None) -> Vault:
    """由空金库创建：有输入则校验导入，否则生成新助记词；自动派生序号 0 的钱包。"""
    if vault.is_active:
        raise VaultStateError("金库已存在，请先清空")
    if seed_input and seed_input.strip():
        seed = validate_seed_phrase(seed_input)
    else:
        seed = generate_seed_phrase(DEFAULT_WORD_COUNT)
    first = derive_wallet(seed, 0)
    return Vault(seed_phrase=seed, wallets=(first,))


def add_wallet(vault: Vault) -> Tuple[Vault, WalletRecord]:
    """派生并追加一个新钱包，返回新金库与新记录。"""
    seed = _require_active(vault, "add_wallet")
    wallet = derive_wallet(seed, vault.next_account_index())
    return Vault(seed_phrase=seed, wallets=vault.wallets + (wallet,)), wallet


def delete_wallet(vault: Vault, wallet_id: str) -> Vault:
    """删除指定钱包；唯一剩余的钱包不可删除。"""
    seed = _require_active(vault, "delete_wallet")
    if vault.find(wallet_id) is None:
        raise WalletNotFoundError(wallet_id)
    if len(vault.wallets) == 1:
        raise LastWalletError("不能删除最后一个钱包，请改为清空整个金库")
    remaining = tuple(w for w in vault.wallets if w.id != wallet_id)
    return Vault(seed_phrase=seed, wallets=remaining)


def clear_vault(vault: Vault) -> Vault:
    """丢弃助记词与全部钱包，回到空金库。确认逻辑由调用方负责。"""
    return Vault.empty()


def verify_vault(vault: Vault) -> bool:
    """重新派生每个钱包并比对密钥，用于确定性自检。"""
    if vault.seed_phrase is None:
        return not vault.wallets
    for wallet in vault.wallets:
        fresh = derive_wallet(vault.seed_phrase, wallet.account_index)
        if fresh.ethereum != wallet.ethereum or fresh.solana != wallet.solana:
            return False
    return True


class VaultStore:
    """会话持有的金库，所有变更操作在同一把锁内串行执行（单写者）。

    Usage:
        store = VaultStore()
        store.create_vault()          # 生成新助记词，得到 Wallet 1
        wallet = store.add_wallet()   # 序号 1
        store.delete_wallet(wallet.id)
        store.clear_vault()
    """

    def __init__(self, vault: Optional[Vault] = None) -> None:
        self._vault = vault or Vault.empty()
        self._lock = threading.RLock()

    @property
    def vault(self) -> Vault:
        """当前金库快照（不可变值）。"""
        return self._vault

    @property
    def state(self) -> VaultState:
        return self._vault.state

    @property
    def is_active(self) -> bool:
        return self._vault.is_active

    @property
    def seed_phrase(self) -> Optional[SeedPhrase]:
        return self._vault.seed_phrase

    @property
    def wallets(self) -> Tuple[WalletRecord, ...]:
        return self._vault.wallets

    def __len__(self) -> int:
        return len(self._vault.wallets)

    def get_wallet(self, wallet_id: str) -> WalletRecord:
        """按 id 获取钱包，不存在时抛出 WalletNotFoundError。"""
        wallet = self._vault.find(wallet_id)
        if wallet is None:
            raise WalletNotFoundError(wallet_id)
        return wallet

    def create_vault(self, seed_input: Optional[str] = None) -> Vault:
        with self._lock:
            self._vault = create_vault(self._vault, seed_input)
            imported = bool(seed_input and seed_input.strip())
            logger.info(
                "金库已创建（{}，{} 词）",
                "导入" if imported else "新生成",
                self._vault.seed_phrase.word_count,
            )
            return self._vault

    def add_wallet(self) -> WalletRecord:
        with self._lock:
            self._vault, wallet = add_wallet(self._vault)
            logger.info("已新增钱包，序号 {}", wallet.account_index)
            return wallet

    def delete_wallet(self, wallet_id: str) -> None:
        with self._lock:
            try:
                self._vault = delete_wallet(self._vault, wallet_id)
            except LastWalletError:
                logger.warning("拒绝删除最后一个钱包: {}", wallet_id)
                raise
            logger.info("已删除钱包 {}，剩余 {} 个", wallet_id, len(self._vault.wallets))

    def clear_vault(self) -> Vault:
        with self._lock:
            was_active = self._vault.is_active
            self._vault = clear_vault(self._vault)
            if was_active:
                logger.info("金库已清空")
            return self._vault

    def verify(self) -> bool:
        """对当前快照执行确定性自检。"""
        return verify_vault(self._vault)
