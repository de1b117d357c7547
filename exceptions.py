"""自定义异常：金库核心错误与余额查询错误。

错误信息中不得出现助记词单词或私钥。
"""

from enum import Enum
from typing import Sequence


class SeedErrorReason(str, Enum):
    """助记词校验失败的原因。"""

    WORD_COUNT = "word_count"
    UNKNOWN_WORD = "unknown_word"
    CHECKSUM = "checksum"


class VaultError(Exception):
    """金库核心错误基类。"""

    pass


class InvalidSeedError(VaultError):
    """助记词词数、单词或校验和不合法。在任何状态变更之前抛出。"""

    def __init__(
        self,
        message: str,
        reason: SeedErrorReason,
        positions: Sequence[int] = (),
    ) -> None:
        super().__init__(message)
        self.reason = reason
        # 不在词表中的单词位置（从 1 开始）
        self.positions = tuple(positions)


class LastWalletError(VaultError):
    """试图删除唯一剩余的钱包；调用方应改为清空金库。"""

    pass


class VaultStateError(VaultError):
    """当前状态下不允许该操作（例如金库为空时新增钱包）。"""

    pass


class WalletNotFoundError(VaultError):
    """金库中不存在指定 id 的钱包。"""

    def __init__(self, wallet_id: str) -> None:
        super().__init__(f"钱包不存在: {wallet_id}")
        self.wallet_id = wallet_id


class OracleUnavailable(Exception):
    """余额查询失败。非致命，由调用方降级为未知余额。"""

    pass
