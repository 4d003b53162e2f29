"""
JSON-RPC transport: rate limiting, 429 retry, Ok / Err results.
"""

from seeker_verify.rpc.result import Err, Ok, Result
from seeker_verify.rpc.transport import RateLimiter, RpcTransport, call

__all__ = ["Err", "Ok", "Result", "RateLimiter", "RpcTransport", "call"]
