#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Balance lookups against the Blockstream Esplora API
"""
import requests

EXPLORER_URLS = {
    "mainnet": "https://blockstream.info/api",
    "testnet": "https://blockstream.info/testnet/api",
}

DEFAULT_TIMEOUT = 10


class ExplorerError(RuntimeError):
    """The block explorer could not answer a balance query."""


def explorer_url(network: str, base_url: str = None) -> str:
    if base_url:
        return base_url.rstrip("/")
    try:
        return EXPLORER_URLS[network]
    except KeyError:
        raise ValueError(f"unknown network: {network!r}")


def _stats_balance(stats) -> int:
    if not stats:
        return 0
    return int(stats.get("funded_txo_sum", 0)) - int(stats.get("spent_txo_sum", 0))


def get_address_balance(address: str, network: str = "mainnet", session=None,
                        base_url: str = None, timeout: float = DEFAULT_TIMEOUT) -> int:
    """
    Confirmed plus mempool balance of an address, in satoshis.

    Any transport, HTTP status or payload problem is raised as ExplorerError.
    """
    url = f"{explorer_url(network, base_url)}/address/{address}"
    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        raise ExplorerError(f"Balance lookup failed for {address}: {e}")
    except ValueError as e:
        raise ExplorerError(f"Explorer returned invalid JSON for {address}: {e}")

    try:
        return _stats_balance(data.get("chain_stats")) + _stats_balance(data.get("mempool_stats"))
    except (AttributeError, TypeError, ValueError) as e:
        raise ExplorerError(f"Unexpected explorer payload for {address}: {e}")
