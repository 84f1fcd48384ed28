from __future__ import annotations

import hmac
from contextlib import contextmanager
from typing import Iterator, Union

from .errors import InvalidArgument

BytesLike = Union[bytes, bytearray, memoryview]


def zero(buf: bytearray) -> None:
	# 同长度切片赋值，原地覆盖，不会重新分配
	buf[:] = bytes(len(buf))


@contextmanager
def wiped(*buffers: bytearray) -> Iterator[None]:
	"""Zero every given buffer when the block exits, however it exits."""
	try:
		yield
	finally:
		for buf in buffers:
			zero(buf)


@contextmanager
def secret_bytes(text: str) -> Iterator[bytearray]:
	try:
		buf = bytearray(text, "utf-8")
	except UnicodeEncodeError as e:
		raise InvalidArgument("secret is not encodable as UTF-8") from e
	try:
		yield buf
	finally:
		zero(buf)


def constant_time_equals(a: BytesLike, b: BytesLike) -> bool:
	# 长度属于记录格式，不是秘密
	if len(a) != len(b):
		return False
	return hmac.compare_digest(a, b)
