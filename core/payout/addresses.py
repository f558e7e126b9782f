"""
체인 주소 해석

사용자 프로필에 저장된 체인별 지갑 주소를 정규화하고
지급 체인에 맞는 수신 주소를 찾는다.

저장 형식 (모두 허용):
- {"eth": "0x..", "solana": "So1.."}
- {"eth": {"address": "0x.."}}
- [{"chain": "eth", "address": "0x.."}, ...]
- 위 형식의 JSON 문자열
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = "evm"

# 체인 별칭 → 정규 키
CHAIN_ALIASES: dict[str, str] = {
    "ethereum": "eth",
    "eth": "eth",
    "mainnet": "eth",
    "bsc": "bsc",
    "binance": "bsc",
    "polygon": "polygon",
    "matic": "polygon",
    "arbitrum": "arbitrum",
    "arb": "arbitrum",
    "base": "base",
    "sol": "solana",
    "solana": "solana",
    "evm": "evm",
}

# EVM 호환 체인 (evm 주소 하나로 수령 가능)
EVM_CHAINS: frozenset[str] = frozenset({
    "evm",
    "eth",
    "ethereum",
    "bsc",
    "polygon",
    "matic",
    "arbitrum",
    "arb",
    "base",
    "optimism",
    "op",
    "linea",
})


def normalize_chain(chain: str | None) -> str:
    """체인 키 정규화 (없으면 evm)"""
    if not chain or not chain.strip():
        return DEFAULT_CHAIN
    lower = chain.strip().lower()
    return CHAIN_ALIASES.get(lower, lower)


def is_evm_chain(chain: str) -> bool:
    return normalize_chain(chain) in EVM_CHAINS


def extract_chain_addresses(value: Any) -> dict[str, str]:
    """저장된 체인 주소 값을 {정규 체인: 주소} 로 변환

    해석할 수 없는 값은 빈 딕셔너리. 같은 체인이 중복되면 첫 번째 주소 사용.
    """
    result: dict[str, str] = {}

    if not value:
        return result

    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            logger.debug("체인 주소 JSON 파싱 실패, 무시")
            return result
        return extract_chain_addresses(parsed)

    def add(chain: Any, address: Any) -> None:
        if not isinstance(chain, str) or not isinstance(address, str):
            return
        key = normalize_chain(chain)
        trimmed = address.strip()
        if trimmed and key not in result:
            result[key] = trimmed

    if isinstance(value, list):
        for entry in value:
            if isinstance(entry, dict):
                add(entry.get("chain"), entry.get("address"))
        return result

    if isinstance(value, dict):
        for chain, raw in value.items():
            if isinstance(raw, dict):
                add(chain, raw.get("address"))
            else:
                add(chain, raw)

    return result


def collect_addresses(
    chain_addresses: Any = None,
    evm_address: str | None = None,
    solana_address: str | None = None,
) -> dict[str, str]:
    """체인 주소 맵 + 레거시 단일 주소 필드 병합

    레거시 필드는 맵에 해당 체인이 없을 때만 사용.
    """
    addresses = extract_chain_addresses(chain_addresses)

    if evm_address and evm_address.strip():
        addresses.setdefault("evm", evm_address.strip())
    if solana_address and solana_address.strip():
        addresses.setdefault("solana", solana_address.strip())

    return addresses


def resolve_address(
    addresses: dict[str, str],
    chain: str | None,
    evm_fallback: str | None = None,
    solana_fallback: str | None = None,
) -> str | None:
    """지급 체인의 수신 주소 결정

    - 해당 체인 주소가 있으면 그대로 사용
    - solana: solana 항목 → solana_fallback
    - EVM 계열: evm → eth → evm_fallback
    - 그 외 체인: evm_fallback

    Returns:
        주소 (없으면 None)
    """
    key = normalize_chain(chain)

    if addresses.get(key):
        return addresses[key]

    if key == "solana":
        return solana_fallback or None

    if key in EVM_CHAINS:
        return addresses.get("evm") or addresses.get("eth") or evm_fallback or None

    return evm_fallback or None
