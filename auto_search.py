#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Auto-search: wander the library at random and check each address for a balance.

Workers share nothing but a cancellation flag and an attempts counter.
Cancellation is cooperative and checked between attempts.
"""
import random
import threading
from collections import namedtuple

from key_derivation import KeyOutOfRange, derive_address
from key_formats import is_usable_key, key_to_hex
from library_codec import location_to_key, random_location

SearchHit = namedtuple("SearchHit", ["location", "key", "address", "balance"])


class AutoSearch:
    def __init__(self, balance_lookup, workers: int = 4, max_attempts: int = 100,
                 network: str = "mainnet", stop_on_hit: bool = True, rng=None, verbose: bool = False):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if max_attempts < 0:
            raise ValueError("max_attempts must be non-negative")
        self.balance_lookup = balance_lookup
        self.workers = workers
        self.max_attempts = max_attempts
        self.network = network
        self.stop_on_hit = stop_on_hit
        self.verbose = verbose
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._attempts = 0
        self._errors = 0
        self._hits = []

    @property
    def attempts(self) -> int:
        with self._lock:
            return self._attempts

    @property
    def errors(self) -> int:
        with self._lock:
            return self._errors

    @property
    def hits(self):
        with self._lock:
            return list(self._hits)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        self._cancelled.set()

    def _claim_attempt(self) -> bool:
        with self._lock:
            if self._attempts >= self.max_attempts:
                return False
            self._attempts += 1
            return True

    def _next_location(self):
        with self._rng_lock:
            return random_location(self._rng)

    def _examine(self, location):
        key = location_to_key(*location)
        if not is_usable_key(key):
            return None
        try:
            address = derive_address(key, self.network)
        except KeyOutOfRange:
            return None
        balance = self.balance_lookup(address)
        if not isinstance(balance, int) or isinstance(balance, bool):
            raise TypeError(f"balance lookup returned {type(balance).__name__} for {address}")
        if balance > 0:
            return SearchHit(location, key_to_hex(key), address, balance)
        return None

    def _record_error(self, e):
        with self._lock:
            self._errors += 1
        if self.verbose:
            print(f"⚠️  {type(e).__name__}: {e}")

    def _worker(self):
        while not self._cancelled.is_set():
            if not self._claim_attempt():
                break
            # A failed attempt is counted as an error; the worker keeps going
            try:
                hit = self._examine(self._next_location())
            except Exception as e:
                self._record_error(e)
                continue
            if hit is None:
                continue
            with self._lock:
                self._hits.append(hit)
            if self.verbose:
                print(f"✅ Found balance {hit.balance} at {hit.address}")
            if self.stop_on_hit:
                self.cancel()

    def run(self):
        """Run all workers to completion and return the hits."""
        threads = [
            threading.Thread(target=self._worker, name=f"auto-search-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return self.hits
