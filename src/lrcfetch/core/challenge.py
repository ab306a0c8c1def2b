# core/challenge.py
"""
Proof-of-work puzzle required by LRCLIB before publishing or flagging.

The service hands out a (prefix, target) pair. The answer is the smallest
decimal nonce such that sha256(prefix + nonce), read as a big-endian number,
is not greater than the hex target.
"""
from __future__ import annotations

import hashlib
import logging
from concurrent.futures import Executor, ProcessPoolExecutor
from itertools import count
from typing import Optional

from lrcfetch.core.models import Challenge

logger = logging.getLogger(__name__)


def verify_nonce(prefix: str, nonce: str, target: str) -> bool:
    digest = hashlib.sha256(f"{prefix}{nonce}".encode("utf-8")).digest()
    target_bytes = bytes.fromhex(target)
    if len(digest) != len(target_bytes):
        return False
    # equal-length bytes compare most-significant byte first
    return digest <= target_bytes


def solve_challenge(prefix: str, target: str) -> str:
    """Brute-force nonces 0, 1, 2, ... and return the first one that passes."""
    target_bytes = bytes.fromhex(target)
    if len(target_bytes) != hashlib.sha256().digest_size:
        raise ValueError(f"Challenge target must be a 256-bit hex string, got {len(target_bytes) * 8} bits")

    base = hashlib.sha256(prefix.encode("utf-8"))
    for nonce in count():
        hasher = base.copy()
        hasher.update(str(nonce).encode("ascii"))
        if hasher.digest() <= target_bytes:
            return str(nonce)


def solve_challenge_off_thread(prefix: str, target: str, executor: Optional[Executor] = None) -> str:
    """
    Run solve_challenge on a dedicated worker and wait for the nonce.

    Without an executor a single-process pool is spun up for the duration of
    the call, so the hashing loop never competes with I/O threads for the GIL.
    """
    logger.info("Solving publish challenge (prefix=%s)", prefix)
    if executor is not None:
        return executor.submit(solve_challenge, prefix, target).result()

    with ProcessPoolExecutor(max_workers=1) as pool:
        return pool.submit(solve_challenge, prefix, target).result()


def make_publish_token(challenge: Challenge, nonce: str) -> str:
    return f"{challenge.prefix}:{nonce}"
