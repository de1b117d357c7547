"""余额查询协作方：抽象接口、基于 JSON-RPC 的实现，以及并发批量查询。

核心不重试、不缓存、不限流；查询失败一律降级为未知余额，不影响金库。
"""

import asyncio
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

import aiohttp
from loguru import logger

from config import (
    BALANCE_DECIMAL_PLACES,
    RPC_ENDPOINTS,
    RPC_TIMEOUT_SECONDS,
    UNKNOWN_BALANCE,
    ChainType,
    Network,
    RpcEndpoint,
)
from exceptions import OracleUnavailable
from models import WalletRecord

BalanceKey = Tuple[str, ChainType]

_QUANTUM = Decimal(1).scaleb(-BALANCE_DECIMAL_PLACES)


def format_balance(raw: int, decimals: int) -> str:
    """将最小单位整数换算为固定 4 位小数的字符串。"""
    value = Decimal(raw).scaleb(-decimals)
    return str(value.quantize(_QUANTUM, rounding=ROUND_HALF_UP))


class BalanceOracle(ABC):
    """余额查询接口，由外部实现替换。"""

    @abstractmethod
    async def get_balance(self, address: str, chain: ChainType, network: Network) -> str:
        """查询地址余额。

        Returns:
            固定 4 位小数的十进制字符串。

        Raises:
            OracleUnavailable: 任意查询失败。
        """
        raise NotImplementedError


class RpcBalanceOracle(BalanceOracle):
    """通过 JSON-RPC 查询以太坊（eth_getBalance）与 Solana（getBalance）余额。

    Usage:
        async with RpcBalanceOracle() as oracle:
            sol = await oracle.get_balance(address, ChainType.SOLANA, Network.DEVNET)
    """

    def __init__(
        self,
        endpoints: Optional[Dict[Tuple[ChainType, Network], RpcEndpoint]] = None,
        timeout: float = RPC_TIMEOUT_SECONDS,
    ) -> None:
        self._endpoints = RPC_ENDPOINTS if endpoints is None else endpoints
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None
        self._request_id = 0

    async def __aenter__(self) -> "RpcBalanceOracle":
        self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def endpoint(self, chain: ChainType, network: Network) -> RpcEndpoint:
        try:
            return self._endpoints[(chain, network)]
        except KeyError as e:
            raise OracleUnavailable(f"未配置 {chain.value}/{network.value} 的 RPC 端点") from e

    async def _call(self, url: str, method: str, params: list) -> Any:
        """发送单次 JSON-RPC 请求并返回 result 字段。"""
        session = self._ensure_session()
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}
        try:
            async with session.post(url, json=payload) as response:
                if response.status != 200:
                    raise OracleUnavailable(f"RPC 返回状态码 {response.status}")
                body: Dict[str, Any] = await response.json()
        except aiohttp.ClientError as e:
            raise OracleUnavailable(f"RPC 连接失败: {e}") from e
        except asyncio.TimeoutError as e:
            raise OracleUnavailable("RPC 请求超时") from e
        except ValueError as e:
            raise OracleUnavailable(f"RPC 响应不是合法 JSON: {e}") from e

        if not isinstance(body, dict):
            raise OracleUnavailable("RPC 响应格式不正确")
        if body.get("error"):
            raise OracleUnavailable(f"RPC 错误: {body['error']}")
        if "result" not in body:
            raise OracleUnavailable("RPC 响应缺少 result 字段")
        return body["result"]

    async def get_balance(self, address: str, chain: ChainType, network: Network) -> str:
        endpoint = self.endpoint(chain, network)
        if chain == ChainType.ETHEREUM:
            result = await self._call(endpoint.rpc_url, "eth_getBalance", [address, "latest"])
            raw = _parse_wei(result)
        else:
            result = await self._call(endpoint.rpc_url, "getBalance", [address])
            raw = _parse_lamports(result)
        return format_balance(raw, endpoint.decimals)


def _parse_wei(result: Any) -> int:
    if not isinstance(result, str):
        raise OracleUnavailable(f"eth_getBalance 结果格式不正确: {result!r}")
    try:
        return int(result, 16)
    except ValueError as e:
        raise OracleUnavailable(f"eth_getBalance 结果格式不正确: {result!r}") from e


def _parse_lamports(result: Any) -> int:
    # Solana 返回 {"context": {...}, "value": lamports}
    value = result.get("value") if isinstance(result, dict) else None
    if isinstance(value, bool) or not isinstance(value, int):
        raise OracleUnavailable(f"getBalance 结果格式不正确: {result!r}")
    return value


async def balance_or_unknown(
    oracle: BalanceOracle, address: str, chain: ChainType, network: Network
) -> str:
    """查询余额，失败时返回 UNKNOWN_BALANCE 而不是抛出。"""
    try:
        return await oracle.get_balance(address, chain, network)
    except OracleUnavailable as e:
        logger.warning("余额查询失败 {} ({}/{}): {}", address, chain.value, network.value, e)
        return UNKNOWN_BALANCE


async def fetch_balances(
    oracle: BalanceOracle,
    wallets: Iterable[WalletRecord],
    network: Network,
) -> Dict[BalanceKey, str]:
    """并发查询每个钱包在两条链上的余额，各查询互不影响。"""
    keys = []
    tasks = []
    for wallet in wallets:
        for chain in (ChainType.ETHEREUM, ChainType.SOLANA):
            keys.append((wallet.id, chain))
            tasks.append(balance_or_unknown(oracle, wallet.keypair(chain).address, chain, network))
    results = await asyncio.gather(*tasks)
    return dict(zip(keys, results))


def current_balances(
    balances: Dict[BalanceKey, str],
    fetched_network: Network,
    current_network: Network,
    live_ids: Iterable[str],
) -> Dict[BalanceKey, str]:
    """丢弃过期的查询结果：网络已切换时全部丢弃，已删除钱包的条目逐个丢弃。"""
    if fetched_network != current_network:
        return {}
    live = set(live_ids)
    return {key: value for key, value in balances.items() if key[0] in live}
