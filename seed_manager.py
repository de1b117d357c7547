"""助记词生成与校验（BIP39 英文词表）。"""

from typing import List

from loguru import logger
from mnemonic import Mnemonic

from config import DEFAULT_WORD_COUNT, MNEMONIC_LANGUAGE, VALID_WORD_COUNTS, WORD_COUNT_TO_STRENGTH
from exceptions import InvalidSeedError, SeedErrorReason
from models import SeedPhrase

# 使用标准 BIP39 英文词表的生成器
MNEMONIC_GEN = Mnemonic(MNEMONIC_LANGUAGE)
_WORDSET = frozenset(MNEMONIC_GEN.wordlist)


def generate_seed_phrase(num_words: int = DEFAULT_WORD_COUNT) -> SeedPhrase:
    """使用安全随机源生成 12 或 24 词助记词。"""
    if num_words not in WORD_COUNT_TO_STRENGTH:
        raise ValueError("助记词长度仅支持 12/24")
    phrase = MNEMONIC_GEN.generate(strength=WORD_COUNT_TO_STRENGTH[num_words])
    logger.debug("已生成 {} 词助记词", num_words)
    return SeedPhrase(words=tuple(phrase.split(" ")))


def _tokenize(candidate: str) -> List[str]:
    return [word.lower() for word in candidate.split()]


def validate_seed_phrase(candidate: str) -> SeedPhrase:
    """
    校验用户输入的助记词并返回 SeedPhrase。

    依次检查词数、单词是否在词表中、校验和；任一失败抛出 InvalidSeedError。
    """
    words = _tokenize(candidate)
    if len(words) not in VALID_WORD_COUNTS:
        raise InvalidSeedError(
            f"助记词必须为 12 或 24 个单词，实际为 {len(words)} 个",
            reason=SeedErrorReason.WORD_COUNT,
        )

    unknown = [pos for pos, word in enumerate(words, start=1) if word not in _WORDSET]
    if unknown:
        positions = ", ".join(str(p) for p in unknown)
        raise InvalidSeedError(
            f"第 {positions} 个单词不在 BIP39 词表中",
            reason=SeedErrorReason.UNKNOWN_WORD,
            positions=unknown,
        )

    if not MNEMONIC_GEN.check(" ".join(words)):
        raise InvalidSeedError("助记词校验和不匹配", reason=SeedErrorReason.CHECKSUM)

    return SeedPhrase(words=tuple(words))


def mnemonic_to_seed(seed: SeedPhrase, passphrase: str = "") -> bytes:
    """通过 BIP39 标准（PBKDF2-HMAC-SHA512）将助记词转换为 64 字节种子。"""
    return MNEMONIC_GEN.to_seed(str(seed), passphrase)
