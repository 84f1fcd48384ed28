from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from .memory import BytesLike, zero


ALGORITHM_TAG = "pbkdf2_sha256"
PREFIX = ALGORITHM_TAG + "$"
# 记录中的迭代次数按有符号 32 位整数读取
MAX_ITERATIONS = 2**31 - 1

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class DecodedRecord:
	iterations: int
	salt: bytearray
	digest: bytearray

	def wipe(self) -> None:
		zero(self.salt)
		zero(self.digest)

	def __enter__(self) -> "DecodedRecord":
		return self

	def __exit__(self, *exc_info) -> None:
		self.wipe()


def _encode(raw: BytesLike) -> str:
	return base64.b64encode(raw).decode("ascii")


def _decode(value: str) -> Optional[bytearray]:
	try:
		raw = base64.b64decode(value.encode("ascii"), validate=True)
	except (binascii.Error, UnicodeEncodeError, ValueError):
		return None
	buf = bytearray(raw)
	del raw
	return buf


def encode_record(iterations: int, salt: BytesLike, key: BytesLike) -> str:
	return f"{PREFIX}{iterations}${_encode(salt)}${_encode(key)}"


def _parse_iterations(text: str) -> Optional[int]:
	if not _DIGITS.fullmatch(text):
		return None
	# 位数过多时直接拒绝，避免解析超长数字
	if len(text.lstrip("0")) > len(str(MAX_ITERATIONS)):
		return None
	value = int(text)
	if value <= 0 or value > MAX_ITERATIONS:
		return None
	return value


def decode_record(text: str) -> Optional[DecodedRecord]:
	"""Parse a ``pbkdf2_sha256$<iterations>$<salt>$<hash>`` record.

	Returns None for anything that is not exactly the tag followed by three
	non-empty ``$``-separated fields with a positive iteration count and
	strict, padded standard Base64 in both byte fields.
	"""
	if not isinstance(text, str) or not text.startswith(PREFIX):
		return None
	fields = text[len(PREFIX):].split("$")
	if len(fields) != 3 or not all(fields):
		return None
	iterations_text, salt_b64, hash_b64 = fields

	iterations = _parse_iterations(iterations_text)
	if iterations is None:
		return None

	salt = _decode(salt_b64)
	if not salt:
		return None
	digest = _decode(hash_b64)
	if not digest:
		zero(salt)
		return None
	return DecodedRecord(iterations=iterations, salt=salt, digest=digest)


def describe_record(text: str) -> Optional[dict]:
	decoded = decode_record(text)
	if decoded is None:
		return None
	with decoded:
		return {
			"algorithm": ALGORITHM_TAG,
			"iterations": decoded.iterations,
			"salt_bytes": len(decoded.salt),
			"hash_bytes": len(decoded.digest),
		}
