from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from .hashing import DEFAULT_ITERATIONS, hash_password, verify_password


@dataclass
class BenchResult:
	iterations: int
	rounds: int
	hash_ms: float
	verify_ok_ms: float
	verify_bad_ms: float


def measure(operation: Callable[[], object], rounds: int) -> float:
	"""Mean wall time of ``operation`` in milliseconds."""
	if rounds <= 0:
		raise ValueError("rounds must be positive")
	start = time.perf_counter()
	for _ in range(rounds):
		operation()
	return (time.perf_counter() - start) * 1000.0 / rounds


def _same_length_mismatch(secret: str) -> str:
	last = "b" if secret[-1] == "a" else "a"
	return secret[:-1] + last


def benchmark(iterations: int = DEFAULT_ITERATIONS, rounds: int = 5, secret: str = "correct horse battery staple") -> BenchResult:
	record = hash_password(secret, iterations=iterations)
	wrong = _same_length_mismatch(secret)
	return BenchResult(
		iterations=iterations,
		rounds=rounds,
		hash_ms=measure(lambda: hash_password(secret, iterations=iterations), rounds),
		verify_ok_ms=measure(lambda: verify_password(secret, record), rounds),
		verify_bad_ms=measure(lambda: verify_password(wrong, record), rounds),
	)
