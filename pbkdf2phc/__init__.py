from .errors import InvalidArgument, OperationFailed, Pbkdf2Error
from .hashing import (
	DEFAULT_HASH_BYTES,
	DEFAULT_ITERATIONS,
	DEFAULT_SALT_BYTES,
	hash_password,
	hash_with,
	verify_password,
)
from .record import ALGORITHM_TAG, describe_record

__all__ = [
	"ALGORITHM_TAG",
	"DEFAULT_HASH_BYTES",
	"DEFAULT_ITERATIONS",
	"DEFAULT_SALT_BYTES",
	"InvalidArgument",
	"OperationFailed",
	"Pbkdf2Error",
	"describe_record",
	"hash_password",
	"hash_with",
	"verify_password",
]
