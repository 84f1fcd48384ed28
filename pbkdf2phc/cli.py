from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from typing import Optional

from .benchmark import benchmark
from .config import DEFAULT_CONFIG, Config, try_load_config
from .errors import InvalidArgument, OperationFailed
from .hashing import hash_password, verify_password
from .record import describe_record


def _positive_int(text: str) -> int:
	try:
		value = int(text)
	except ValueError as e:
		raise argparse.ArgumentTypeError(f"需要正整数: {text}") from e
	if value <= 0:
		raise argparse.ArgumentTypeError(f"需要正整数: {text}")
	return value


def _load(args: argparse.Namespace) -> Config:
	return try_load_config(args.config) or DEFAULT_CONFIG


def _read_secret(args: argparse.Namespace, prompt: str = "密码: ") -> str:
	if args.stdin:
		# 只去掉行尾换行，保留首尾空格
		return sys.stdin.readline().rstrip("\r\n")
	return getpass.getpass(prompt)


def cmd_hash(args: argparse.Namespace) -> int:
	hashing = _load(args).hashing
	secret = _read_secret(args)
	try:
		record = hash_password(
			secret,
			iterations=args.iterations or hashing.iterations,
			salt_bytes=args.salt_bytes or hashing.salt_bytes,
			hash_bytes=args.hash_bytes or hashing.hash_bytes,
		)
	except (InvalidArgument, OperationFailed) as e:
		print(f"生成失败: {e}", file=sys.stderr)
		return 2
	print(record)
	return 0


def cmd_verify(args: argparse.Namespace) -> int:
	secret = _read_secret(args)
	if verify_password(secret, args.record):
		print("匹配")
		return 0
	print("不匹配")
	return 1


def cmd_inspect(args: argparse.Namespace) -> int:
	info = describe_record(args.record)
	if info is None:
		print("记录格式无效")
		return 1
	print(f"algorithm\t{info['algorithm']}")
	print(f"iterations\t{info['iterations']}")
	print(f"salt_bytes\t{info['salt_bytes']}")
	print(f"hash_bytes\t{info['hash_bytes']}")
	return 0


def cmd_bench(args: argparse.Namespace) -> int:
	iterations = args.iterations or _load(args).hashing.iterations
	try:
		result = benchmark(iterations=iterations, rounds=args.rounds)
	except (InvalidArgument, OperationFailed) as e:
		print(f"测量失败: {e}", file=sys.stderr)
		return 2
	print(f"iterations={result.iterations} rounds={result.rounds}")
	print(f"hash\t{result.hash_ms:.2f} ms")
	print(f"verify(ok)\t{result.verify_ok_ms:.2f} ms")
	print(f"verify(bad)\t{result.verify_bad_ms:.2f} ms")
	return 0


def cmd_serve(args: argparse.Namespace) -> int:
	from .web import serve

	serve(_load(args), host=args.host, port=args.port)
	return 0


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="pbkdf2phc",
		description="PBKDF2-SHA256 密码记录生成与校验",
	)
	parser.add_argument(
		"-C",
		"--chdir",
		help="在执行前切换至该目录",
		default=None,
	)
	parser.add_argument(
		"-c",
		"--config",
		help="配置文件路径 (默认: config.json)",
		default="config.json",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
	sp = parser.add_subparsers(dest="cmd", required=True)

	sp_hash = sp.add_parser("hash", help="为密码生成记录")
	sp_hash.add_argument("--iterations", type=_positive_int, default=None, help="迭代次数（默认取配置）")
	sp_hash.add_argument("--salt-bytes", type=_positive_int, default=None, help="盐长度（字节）")
	sp_hash.add_argument("--hash-bytes", type=_positive_int, default=None, help="派生密钥长度（字节）")
	sp_hash.add_argument("--stdin", action="store_true", help="从标准输入读取一行作为密码")
	sp_hash.set_defaults(func=cmd_hash)

	sp_verify = sp.add_parser("verify", help="校验密码与记录是否匹配")
	sp_verify.add_argument("--record", required=True, help="pbkdf2_sha256$... 记录")
	sp_verify.add_argument("--stdin", action="store_true", help="从标准输入读取一行作为密码")
	sp_verify.set_defaults(func=cmd_verify)

	sp_inspect = sp.add_parser("inspect", help="查看记录参数（不含密钥）")
	sp_inspect.add_argument("--record", required=True, help="pbkdf2_sha256$... 记录")
	sp_inspect.set_defaults(func=cmd_inspect)

	sp_bench = sp.add_parser("bench", help="测量生成与校验耗时")
	sp_bench.add_argument("--iterations", type=_positive_int, default=None, help="迭代次数（默认取配置）")
	sp_bench.add_argument("--rounds", type=_positive_int, default=5, help="重复次数")
	sp_bench.set_defaults(func=cmd_bench)

	sp_serve = sp.add_parser("serve", help="启动 HTTP 服务")
	sp_serve.add_argument("--host", default=None, help="监听地址（默认取配置）")
	sp_serve.add_argument("--port", type=int, default=None, help="监听端口（默认取配置）")
	sp_serve.set_defaults(func=cmd_serve)

	return parser


def main(argv: Optional[list[str]] = None) -> int:
	argv = list(sys.argv[1:] if argv is None else argv)
	parser = build_parser()
	args = parser.parse_args(argv)
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
	if args.chdir:
		os.chdir(args.chdir)
	return args.func(args)


if __name__ == "__main__":
	sys.exit(main())
