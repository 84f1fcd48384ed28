from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import InvalidArgument
from .hashing import DEFAULT_HASH_BYTES, DEFAULT_ITERATIONS, DEFAULT_SALT_BYTES
from .record import MAX_ITERATIONS


def _check_positive(name: str, value: object) -> None:
	if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
		raise InvalidArgument(f"{name} 必须为正整数")


@dataclass(frozen=True)
class HashingConfig:
	iterations: int = DEFAULT_ITERATIONS
	salt_bytes: int = DEFAULT_SALT_BYTES
	hash_bytes: int = DEFAULT_HASH_BYTES

	def __post_init__(self) -> None:
		for name in ("iterations", "salt_bytes", "hash_bytes"):
			_check_positive(f"hashing.{name}", getattr(self, name))
		if self.iterations > MAX_ITERATIONS:
			raise InvalidArgument(f"hashing.iterations 不能超过 {MAX_ITERATIONS}")


@dataclass(frozen=True)
class ServerConfig:
	host: str = "127.0.0.1"
	port: int = 8000
	workers: int = 2
	# 服务端允许客户端请求的最大迭代次数；None 表示不限制
	max_iterations: Optional[int] = None
	# 客户端可请求的盐与派生密钥长度上限（字节）
	max_salt_bytes: int = 1024
	max_hash_bytes: int = 1024

	def __post_init__(self) -> None:
		for name in ("workers", "max_salt_bytes", "max_hash_bytes"):
			_check_positive(f"server.{name}", getattr(self, name))
		if self.max_iterations is not None:
			_check_positive("server.max_iterations", self.max_iterations)


@dataclass(frozen=True)
class Config:
	hashing: HashingConfig = field(default_factory=HashingConfig)
	server: ServerConfig = field(default_factory=ServerConfig)


DEFAULT_CONFIG = Config()


def _load_json(path: Path) -> dict:
	with path.open("r", encoding="utf-8") as f:
		return json.load(f)


def config_from_dict(data: dict) -> Config:
	hashing_data = data.get("hashing", {})
	server_data = data.get("server", {})

	hashing = HashingConfig(
		iterations=int(hashing_data.get("iterations", DEFAULT_ITERATIONS)),
		salt_bytes=int(hashing_data.get("salt_bytes", DEFAULT_SALT_BYTES)),
		hash_bytes=int(hashing_data.get("hash_bytes", DEFAULT_HASH_BYTES)),
	)
	max_iterations = server_data.get("max_iterations")
	server = ServerConfig(
		host=str(server_data.get("host", "127.0.0.1")),
		port=int(server_data.get("port", 8000)),
		workers=int(server_data.get("workers", 2)),
		max_iterations=(int(max_iterations) if max_iterations is not None else None),
		max_salt_bytes=int(server_data.get("max_salt_bytes", 1024)),
		max_hash_bytes=int(server_data.get("max_hash_bytes", 1024)),
	)
	return Config(hashing=hashing, server=server)


def load_config(config_path: str = "config.json") -> Config:
	return config_from_dict(_load_json(Path(config_path)))


def try_load_config(config_path: str = "config.json") -> Optional[Config]:
	path = Path(config_path)
	if not path.exists():
		return None
	return load_config(config_path)
