import json

import pytest

from pbkdf2phc.config import Config, HashingConfig, ServerConfig
from pbkdf2phc.web import create_app

# 测试用低迭代次数，保证速度
FAST_ITERATIONS = 1_000


@pytest.fixture
def fast_config():
	return Config(
		hashing=HashingConfig(iterations=FAST_ITERATIONS),
		server=ServerConfig(workers=2, max_iterations=50_000),
	)


@pytest.fixture
def client(fast_config):
	app = create_app(config=fast_config)
	app.config["TESTING"] = True
	with app.test_client() as c:
		yield c
	app.extensions["pbkdf2_pool"].shutdown(wait=True)


@pytest.fixture
def config_file(tmp_path):
	def _write(data):
		path = tmp_path / "config.json"
		path.write_text(json.dumps(data), encoding="utf-8")
		return path

	return _write
