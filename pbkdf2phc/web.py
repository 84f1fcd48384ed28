from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request

from .config import DEFAULT_CONFIG, Config, try_load_config
from .errors import InvalidArgument, OperationFailed
from .hashing import hash_password, verify_password
from .record import ALGORITHM_TAG, describe_record


def _resolve_config(config_path: Optional[str], config: Optional[Config]) -> Config:
	if config is not None:
		return config
	if config_path is None:
		return DEFAULT_CONFIG
	# 相对路径按项目根目录（包上级目录）解析
	conf_path = Path(config_path)
	if not conf_path.is_absolute():
		conf_path = Path(__file__).resolve().parent.parent / conf_path
	return try_load_config(conf_path.as_posix()) or DEFAULT_CONFIG


def _exceeds(value: object, limit: Optional[int]) -> bool:
	return limit is not None and isinstance(value, int) and value > limit


def create_app(config_path: Optional[str] = None, config: Optional[Config] = None) -> Flask:
	conf = _resolve_config(config_path, config)
	hashing = conf.hashing
	limits = conf.server
	# KDF 是 CPU 密集型任务，限制并发数量，避免占满请求线程
	pool = ThreadPoolExecutor(max_workers=conf.server.workers, thread_name_prefix="pbkdf2")

	app = Flask(__name__)
	app.config["PBKDF2_CONFIG"] = conf
	app.extensions["pbkdf2_pool"] = pool

	@app.get("/healthz")
	def healthz():
		return jsonify({"status": "ok", "algorithm": ALGORITHM_TAG, "iterations": hashing.iterations})

	@app.post("/api/hash")
	def api_hash():
		data = request.get_json(silent=True)
		if not isinstance(data, dict):
			return jsonify({"error": "JSON object required"}), 400
		secret = data.get("secret")
		iterations = data.get("iterations", hashing.iterations)
		salt_bytes = data.get("salt_bytes", hashing.salt_bytes)
		hash_bytes = data.get("hash_bytes", hashing.hash_bytes)
		for name, value, limit in (
			("iterations", iterations, limits.max_iterations),
			("salt_bytes", salt_bytes, limits.max_salt_bytes),
			("hash_bytes", hash_bytes, limits.max_hash_bytes),
		):
			if _exceeds(value, limit):
				return jsonify({"error": f"{name} must not exceed {limit}"}), 400

		started = time.perf_counter()
		try:
			record = pool.submit(hash_password, secret, iterations, salt_bytes, hash_bytes).result()
		except InvalidArgument as e:
			return jsonify({"error": str(e)}), 400
		except OperationFailed:
			app.logger.exception("hash request failed")
			return jsonify({"error": "hashing failed"}), 500
		app.logger.info("hash ok in %.1f ms", (time.perf_counter() - started) * 1000.0)
		return jsonify({"record": record}), 201

	@app.post("/api/verify")
	def api_verify():
		data = request.get_json(silent=True)
		if not isinstance(data, dict):
			return jsonify({"error": "JSON object required"}), 400
		record = data.get("record")
		# 超出服务端限制的记录不做派生，直接按不匹配处理
		info = describe_record(record)
		if info is not None and (
			_exceeds(info["iterations"], limits.max_iterations) or _exceeds(info["hash_bytes"], limits.max_hash_bytes)
		):
			app.logger.info("verify rejected: record exceeds server limits")
			return jsonify({"valid": False}), 200
		started = time.perf_counter()
		valid = pool.submit(verify_password, data.get("secret"), record).result()
		app.logger.info("verify valid=%s in %.1f ms", valid, (time.perf_counter() - started) * 1000.0)
		return jsonify({"valid": valid}), 200

	return app


def serve(config: Config, host: Optional[str] = None, port: Optional[int] = None) -> None:
	app = create_app(config=config)
	try:
		app.run(host=host or config.server.host, port=port or config.server.port, debug=False)
	finally:
		app.extensions["pbkdf2_pool"].shutdown()


def main() -> None:
	serve(_resolve_config("config.json", None))


if __name__ == "__main__":
	main()
