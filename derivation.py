"""确定性多链密钥派生：以太坊走 BIP32（secp256k1），Solana 走 SLIP-0010（ed25519）。"""

import hashlib
import hmac
import uuid
from typing import List, Tuple

from base58 import b58encode
from eth_account import Account
from eth_keys import constants as eth_constants
from eth_keys import keys as eth_keys
from nacl.signing import SigningKey

from config import (
    Curve,
    DERIVATION_PATH_TEMPLATE_ETH,
    DERIVATION_PATH_TEMPLATE_SOL,
    HARDENED_OFFSET,
)
from models import ChainKeypair, SeedPhrase, WalletRecord
from seed_manager import mnemonic_to_seed

# 曲线阶常量
SECP256K1_N = eth_constants.SECPK1_N

BIP32_SEED_KEY = b"Bitcoin seed"
SLIP10_ED25519_SEED_KEY = b"ed25519 seed"


def _check_index(index: int) -> None:
    if index < 0 or index >= HARDENED_OFFSET:
        raise ValueError(f"账户序号超出范围: {index}")


def ethereum_path(index: int) -> str:
    """以太坊派生路径 m/44'/60'/0'/0/{index}。"""
    _check_index(index)
    return DERIVATION_PATH_TEMPLATE_ETH.format(index=index)


def solana_path(index: int) -> str:
    """Solana 派生路径 m/44'/501'/{index}'/0'。"""
    _check_index(index)
    return DERIVATION_PATH_TEMPLATE_SOL.format(index=index)


def parse_derivation_path(path: str) -> List[Tuple[int, bool]]:
    """将 m/44'/60'/... 解析为 (序号, 是否硬化) 列表，序号不含硬化偏移。"""
    segments = path.strip().split("/")
    if not segments or segments[0] != "m":
        raise ValueError(f"派生路径必须以 m 开头: {path}")
    parsed: List[Tuple[int, bool]] = []
    for seg in segments[1:]:
        hardened = seg.endswith("'")
        digits = seg[:-1] if hardened else seg
        if not digits.isdigit():
            raise ValueError(f"派生路径段不合法: {seg!r}")
        index = int(digits)
        if index >= HARDENED_OFFSET:
            raise ValueError(f"派生路径序号超出范围: {seg!r}")
        parsed.append((index, hardened))
    return parsed


def _derive_child(private_key: bytes, chain_code: bytes, index: int, hardened: bool) -> Tuple[bytes, bytes]:
    """执行单步 BIP32 子私钥派生（secp256k1）。"""
    if hardened:
        data = b"\x00" + private_key + (index + HARDENED_OFFSET).to_bytes(4, "big")
    else:
        pub_compressed = eth_keys.PrivateKey(private_key).public_key.to_compressed_bytes()
        data = pub_compressed + index.to_bytes(4, "big")
    I = hmac.new(chain_code, data, hashlib.sha512).digest()
    Il, Ir = I[:32], I[32:]
    il_int = int.from_bytes(Il, "big")
    child_int = (il_int + int.from_bytes(private_key, "big")) % SECP256K1_N
    # 概率约 2^-127，BIP32 规定此时该序号无效
    if il_int >= SECP256K1_N or child_int == 0:
        raise ValueError(f"序号 {index} 派生出无效子密钥")
    return child_int.to_bytes(32, "big"), Ir


def derive_secp256k1_private_key(seed: bytes, path: str) -> bytes:
    """从种子和路径计算最终 secp256k1 私钥。"""
    I = hmac.new(BIP32_SEED_KEY, seed, hashlib.sha512).digest()
    priv, chain = I[:32], I[32:]
    for index, hardened in parse_derivation_path(path):
        priv, chain = _derive_child(priv, chain, index, hardened)
    return priv


def derive_ed25519_seed(seed: bytes, path: str) -> bytes:
    """依据 SLIP-0010 派生 ed25519 私钥种子，仅接受全硬化路径。"""
    I = hmac.new(SLIP10_ED25519_SEED_KEY, seed, hashlib.sha512).digest()
    key, chain_code = I[:32], I[32:]
    for index, hardened in parse_derivation_path(path):
        if not hardened:
            raise ValueError(f"ed25519 仅支持硬化派生: {path}")
        data = b"\x00" + key + (index + HARDENED_OFFSET).to_bytes(4, "big")
        I = hmac.new(chain_code, data, hashlib.sha512).digest()
        key, chain_code = I[:32], I[32:]
    return key


def derive_ethereum_keypair(seed: bytes, index: int) -> ChainKeypair:
    """从二进制种子生成以太坊地址（EIP-55）与 0x 私钥。"""
    path = ethereum_path(index)
    priv_key_bytes = derive_secp256k1_private_key(seed, path)
    acct = Account.from_key(priv_key_bytes)
    private_key = acct.key.hex()
    if not private_key.startswith("0x"):
        private_key = f"0x{private_key}"
    public_key = eth_keys.PrivateKey(priv_key_bytes).public_key.to_hex()
    return ChainKeypair(
        address=acct.address,
        private_key=private_key,
        public_key=public_key,
        curve=Curve.SECP256K1,
        derivation_path=path,
    )


def derive_solana_keypair(seed: bytes, index: int) -> ChainKeypair:
    """从二进制种子生成 Solana 地址与 Base58 私钥（64 字节）。"""
    path = solana_path(index)
    private_seed = derive_ed25519_seed(seed, path)
    signing_key = SigningKey(private_seed)
    verify_key = signing_key.verify_key
    secret_key_bytes = signing_key.encode() + verify_key.encode()
    return ChainKeypair(
        address=b58encode(verify_key.encode()).decode("utf-8"),
        private_key=b58encode(secret_key_bytes).decode("utf-8"),
        public_key=verify_key.encode().hex(),
        curve=Curve.ED25519,
        derivation_path=path,
    )


def new_wallet_id(index: int) -> str:
    """生成进程内唯一的钱包 id。"""
    return f"wallet_{index}_{uuid.uuid4().hex}"


def derive_wallet(seed: SeedPhrase, index: int) -> WalletRecord:
    """
    按账户序号派生双链钱包记录。

    :param seed: 已通过校验或新生成的助记词，此处不再重复校验
    :param index: 账户序号，从 0 开始
    """
    _check_index(index)
    binary_seed = mnemonic_to_seed(seed)
    return WalletRecord(
        id=new_wallet_id(index),
        account_index=index,
        ethereum=derive_ethereum_keypair(binary_seed, index),
        solana=derive_solana_keypair(binary_seed, index),
    )
