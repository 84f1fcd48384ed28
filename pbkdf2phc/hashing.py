from __future__ import annotations

import hashlib
import logging
import os
from typing import TYPE_CHECKING

from .errors import InvalidArgument, OperationFailed
from .memory import BytesLike, constant_time_equals, secret_bytes, wiped, zero
from .record import MAX_ITERATIONS, decode_record, encode_record

if TYPE_CHECKING:
	from .config import HashingConfig


logger = logging.getLogger(__name__)

PBKDF2_DIGEST = "sha256"
DEFAULT_ITERATIONS = 300_000
DEFAULT_SALT_BYTES = 16
DEFAULT_HASH_BYTES = 32


def _is_blank(value: object) -> bool:
	return not isinstance(value, str) or not value.strip()


def _require_positive(name: str, value: object) -> int:
	# bool 是 int 的子类，这里单独排除
	if isinstance(value, bool) or not isinstance(value, int):
		raise InvalidArgument(f"{name} must be an integer, got {type(value).__name__}")
	if value <= 0:
		raise InvalidArgument(f"{name} must be positive, got {value}")
	return value


def generate_salt(length: int) -> bytearray:
	try:
		return bytearray(os.urandom(length))
	except (OverflowError, MemoryError) as exc:
		raise OperationFailed(f"cannot generate {length} salt bytes") from exc


def derive(password: BytesLike, salt: BytesLike, iterations: int, length: int) -> bytearray:
	"""Run PBKDF2-HMAC-SHA256 and return the key in a wipeable buffer."""
	try:
		raw = hashlib.pbkdf2_hmac(PBKDF2_DIGEST, password, salt, iterations, length)
	except (ValueError, OverflowError, MemoryError) as exc:
		raise OperationFailed(f"PBKDF2 derivation failed: {exc}") from exc
	key = bytearray(raw)
	del raw
	return key


def hash_password(
	secret: str,
	iterations: int = DEFAULT_ITERATIONS,
	salt_bytes: int = DEFAULT_SALT_BYTES,
	hash_bytes: int = DEFAULT_HASH_BYTES,
) -> str:
	"""Hash a secret into a ``pbkdf2_sha256$<iterations>$<salt>$<hash>`` record.

	Raises InvalidArgument for a missing/blank secret or non-positive
	parameters, and OperationFailed when the backend cannot derive the key.
	"""
	if _is_blank(secret):
		raise InvalidArgument("secret must be a non-blank string")
	_require_positive("iterations", iterations)
	_require_positive("salt_bytes", salt_bytes)
	_require_positive("hash_bytes", hash_bytes)
	if iterations > MAX_ITERATIONS:
		raise InvalidArgument(f"iterations must not exceed {MAX_ITERATIONS}, got {iterations}")

	salt = generate_salt(salt_bytes)
	with wiped(salt), secret_bytes(secret) as pwd:
		key = derive(pwd, salt, iterations, hash_bytes)
		try:
			record = encode_record(iterations, salt, key)
		finally:
			zero(key)
	logger.debug("hashed secret: iterations=%d salt_bytes=%d hash_bytes=%d", iterations, salt_bytes, hash_bytes)
	return record


def hash_with(config: "HashingConfig", secret: str) -> str:
	return hash_password(
		secret,
		iterations=config.iterations,
		salt_bytes=config.salt_bytes,
		hash_bytes=config.hash_bytes,
	)


def verify_password(secret: str, record: str) -> bool:
	"""Check a secret against a record produced by hash_password.

	Malformed records, wrong secrets and backend failures all yield False.
	"""
	if _is_blank(secret) or _is_blank(record):
		return False

	decoded = decode_record(record)
	if decoded is None:
		logger.debug("rejected malformed record")
		return False

	with decoded:
		try:
			with secret_bytes(secret) as pwd:
				candidate = derive(pwd, decoded.salt, decoded.iterations, len(decoded.digest))
				with wiped(candidate):
					return constant_time_equals(candidate, decoded.digest)
		except InvalidArgument:
			return False
		except OperationFailed:
			logger.warning("derivation failed during verification", exc_info=True)
			return False
