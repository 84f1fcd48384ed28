from __future__ import annotations


class Pbkdf2Error(Exception):
	"""Base class for errors raised by pbkdf2phc."""


class InvalidArgument(Pbkdf2Error, ValueError):
	"""A caller-supplied parameter violates a precondition."""


class OperationFailed(Pbkdf2Error, RuntimeError):
	"""The PBKDF2 backend could not produce the requested key."""
