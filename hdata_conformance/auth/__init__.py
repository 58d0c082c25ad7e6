"""Request checkers that apply server specific authentication."""

from hdata_conformance.auth.base import DEFAULT_USER, RequestChecker
from hdata_conformance.auth.basic import BasicAuthRequestChecker

__all__ = ["DEFAULT_USER", "BasicAuthRequestChecker", "RequestChecker"]
