import base64

from pbkdf2phc import web
from pbkdf2phc.hashing import hash_password, verify_password
from pbkdf2phc.web import create_app

from conftest import FAST_ITERATIONS


def test_healthz(client):
	resp = client.get("/healthz")
	assert resp.status_code == 200
	assert resp.get_json() == {"status": "ok", "algorithm": "pbkdf2_sha256", "iterations": FAST_ITERATIONS}


def test_hash_then_verify(client):
	resp = client.post("/api/hash", json={"secret": "hunter2"})
	assert resp.status_code == 201
	record = resp.get_json()["record"]
	assert record.startswith(f"pbkdf2_sha256${FAST_ITERATIONS}$")

	ok = client.post("/api/verify", json={"secret": "hunter2", "record": record})
	assert ok.status_code == 200
	assert ok.get_json() == {"valid": True}

	bad = client.post("/api/verify", json={"secret": "hunter3", "record": record})
	assert bad.get_json() == {"valid": False}


def test_hash_custom_parameters(client):
	resp = client.post(
		"/api/hash",
		json={"secret": "hunter2", "iterations": 2000, "salt_bytes": 24, "hash_bytes": 48},
	)
	assert resp.status_code == 201
	parts = resp.get_json()["record"].split("$")
	assert parts[1] == "2000"
	assert len(base64.b64decode(parts[2])) == 24
	assert len(base64.b64decode(parts[3])) == 48


def test_hash_blank_secret(client):
	resp = client.post("/api/hash", json={"secret": "   "})
	assert resp.status_code == 400
	assert "error" in resp.get_json()


def test_hash_missing_secret(client):
	assert client.post("/api/hash", json={}).status_code == 400


def test_hash_bad_parameter(client):
	assert client.post("/api/hash", json={"secret": "x", "salt_bytes": 0}).status_code == 400


def test_hash_iterations_above_server_cap(client):
	resp = client.post("/api/hash", json={"secret": "hunter2", "iterations": 50_001})
	assert resp.status_code == 400


def test_hash_requires_json_object(client):
	assert client.post("/api/hash", data="secret=x").status_code == 400
	assert client.post("/api/hash", json=["secret"]).status_code == 400


def test_verify_malformed_and_mismatch_look_the_same(client):
	record = hash_password("hunter2", iterations=FAST_ITERATIONS)
	malformed = client.post("/api/verify", json={"secret": "hunter2", "record": "pbkdf2_sha256$abc$def"})
	wrong = client.post("/api/verify", json={"secret": "hunter3", "record": record})
	missing = client.post("/api/verify", json={"secret": "hunter2"})
	assert malformed.status_code == wrong.status_code == missing.status_code == 200
	assert malformed.get_json() == wrong.get_json() == missing.get_json() == {"valid": False}


def test_verify_requires_json_object(client):
	assert client.post("/api/verify", data="nope").status_code == 400


def test_verify_accepts_records_with_other_iterations(client):
	record = hash_password("hunter2", iterations=3_000)
	resp = client.post("/api/verify", json={"secret": "hunter2", "record": record})
	assert resp.get_json() == {"valid": True}


def test_create_app_from_config_file(config_file):
	path = config_file({"hashing": {"iterations": 1200}, "server": {"workers": 1}})
	app = create_app(config_path=str(path))
	try:
		with app.test_client() as c:
			record = c.post("/api/hash", json={"secret": "hunter2"}).get_json()["record"]
		assert record.startswith("pbkdf2_sha256$1200$")
		assert verify_password("hunter2", record)
	finally:
		app.extensions["pbkdf2_pool"].shutdown(wait=True)


def test_create_app_missing_config_uses_defaults(tmp_path):
	app = create_app(config_path=str(tmp_path / "absent.json"))
	try:
		assert app.config["PBKDF2_CONFIG"].hashing.iterations == 300_000
	finally:
		app.extensions["pbkdf2_pool"].shutdown(wait=True)


def test_verify_record_above_iteration_cap_is_not_derived(client, monkeypatch):
	calls = []
	monkeypatch.setattr("pbkdf2phc.web.verify_password", lambda *args: calls.append(args) or True)
	salt = base64.b64encode(b"s" * 16).decode("ascii")
	digest = base64.b64encode(b"d" * 32).decode("ascii")
	resp = client.post("/api/verify", json={"secret": "hunter2", "record": f"pbkdf2_sha256$5000000${salt}${digest}"})
	assert resp.status_code == 200
	assert resp.get_json() == {"valid": False}
	assert calls == []


def test_verify_record_above_hash_bytes_cap_is_not_derived(client, monkeypatch):
	calls = []
	monkeypatch.setattr("pbkdf2phc.web.verify_password", lambda *args: calls.append(args) or True)
	salt = base64.b64encode(b"s" * 16).decode("ascii")
	digest = base64.b64encode(b"d" * 2048).decode("ascii")
	resp = client.post("/api/verify", json={"secret": "hunter2", "record": f"pbkdf2_sha256$1000${salt}${digest}"})
	assert resp.get_json() == {"valid": False}
	assert calls == []


def test_verify_at_iteration_cap_still_derives(client):
	record = hash_password("hunter2", iterations=50_000)
	resp = client.post("/api/verify", json={"secret": "hunter2", "record": record})
	assert resp.get_json() == {"valid": True}


def test_hash_bytes_above_cap(client):
	resp = client.post("/api/hash", json={"secret": "hunter2", "hash_bytes": 6400})
	assert resp.status_code == 400
	assert "hash_bytes" in resp.get_json()["error"]


def test_salt_bytes_above_cap(client):
	resp = client.post("/api/hash", json={"secret": "hunter2", "salt_bytes": 10**9})
	assert resp.status_code == 400
	assert "salt_bytes" in resp.get_json()["error"]


def test_sizes_at_cap_accepted(client):
	resp = client.post("/api/hash", json={"secret": "hunter2", "salt_bytes": 1024, "hash_bytes": 1024})
	assert resp.status_code == 201


def test_serve_shuts_down_pool(monkeypatch, fast_config):
	class Pool:
		closed = False

		def shutdown(self, wait=True):
			Pool.closed = True

	real_create_app = web.create_app

	def fake_create_app(config):
		app = real_create_app(config=config)
		app.extensions["pbkdf2_pool"].shutdown()
		app.extensions["pbkdf2_pool"] = Pool()
		app.run = lambda **kwargs: None
		return app

	monkeypatch.setattr(web, "create_app", fake_create_app)
	web.serve(fast_config)
	assert Pool.closed
