"""Execution machinery: sync bridge, retries, request processing and memory release."""

from .bridge import await_unwrapped, run_sync, unwrap_exception
from .memory import DEFAULT_RELEASE_THRESHOLD, release_large_hits
from .processor import SearchRequestProcessor
from .retry import ExponentialRetryPolicy, NoRetryPolicy, is_transient_error

__all__ = [
    "DEFAULT_RELEASE_THRESHOLD",
    "ExponentialRetryPolicy",
    "NoRetryPolicy",
    "SearchRequestProcessor",
    "await_unwrapped",
    "is_transient_error",
    "release_large_hits",
    "run_sync",
    "unwrap_exception",
]
