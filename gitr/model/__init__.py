from .repo import ClonePlan, Provider, RepoReference, TransportKind, UrlKind
from .scm import HostPolicy, HttpScheme, ScmHostRegistry

__all__ = [
    "ClonePlan",
    "HostPolicy",
    "HttpScheme",
    "Provider",
    "RepoReference",
    "ScmHostRegistry",
    "TransportKind",
    "UrlKind",
]
