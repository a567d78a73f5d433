"""
JSON-RPC transport.

Sends raw JSON-RPC requests, single or batched, through a Web3.py
HTTPProvider, retrying transient transport failures with exponential
backoff. Responses are not interpreted beyond unwrapping result/error.
"""

import logging
import time
from typing import Any, Callable, TypeVar

import requests.exceptions
from web3 import Web3
from web3.exceptions import Web3Exception

from ..core.config import ClientConfig
from .eth import Eth
from .exceptions import RpcError

logger = logging.getLogger(__name__)

# Type variable for generic retry helper
T = TypeVar("T")


class EthRpc:
    """
    Lightweight client on top of an Ethereum JSON-RPC endpoint.

    The Eth API is available as the ``eth`` attribute.

    Example:
        >>> client = EthRpc(rpc_url="http://localhost:8545")
        >>> client.eth.block_number()
        18000000
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        rpc_url: str | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration. Defaults are used if None.
            rpc_url: Endpoint URL, overrides config.rpc.endpoint when given

        Raises:
            ValueError: If the RPC URL is empty or a placeholder
        """
        self.config = config or ClientConfig()
        rpc_url = rpc_url or self.config.rpc_url

        if not rpc_url or rpc_url == "PLACEHOLDER_RPC_URL":
            raise ValueError(
                "Invalid RPC URL. Please configure a valid Ethereum RPC endpoint "
                "in configs/client_config.yaml or pass via --rpc-url"
            )

        self.rpc_url = rpc_url
        self.timeout = self.config.rpc.timeout
        self.max_retries = self.config.rpc.max_retries
        self.backoff_factor = self.config.rpc.backoff_factor

        self.w3 = Web3(
            Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": self.timeout})
        )
        self.eth = Eth(self)

        logger.info(f"Initialized JSON-RPC client for {rpc_url}")

    def is_connected(self) -> bool:
        """Check whether the endpoint answers."""
        return self.w3.is_connected()

    def retry_with_backoff(
        self, func: Callable[..., T], *args: Any, **kwargs: Any
    ) -> T:
        """
        Execute function with exponential backoff retry logic.

        Retries the function on transport errors (network issues, timeouts)
        with exponentially increasing delays between attempts. Errors
        reported by the node itself are not retried.

        Args:
            func: Function to execute
            *args: Positional arguments for the function
            **kwargs: Keyword arguments for the function

        Returns:
            Result from successful function execution

        Raises:
            Exception: Re-raises the last exception if all retries fail
        """
        last_exception = None

        for attempt in range(self.max_retries):
            try:
                return func(*args, **kwargs)

            except (
                requests.exceptions.RequestException,
                Web3Exception,
            ) as e:
                last_exception = e

                if attempt < self.max_retries - 1:
                    delay = self.backoff_factor**attempt
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay:.2f} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"Request failed after {self.max_retries} attempts: {e}"
                    )

        if last_exception:
            raise last_exception
        raise RuntimeError("Function failed but no exception was captured")

    @staticmethod
    def _unwrap(method: str, response: Any) -> Any:
        """Return the result member of a response or raise RpcError."""
        if not isinstance(response, dict):
            raise RpcError(f"Unexpected response to {method} (non-object)")

        if response.get("error") is not None:
            raise RpcError.from_response(response["error"])

        result = response.get("result")
        if result is None:
            raise RpcError(f"RPC responded with null to {method}")
        return result

    def rpc(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Send a single JSON-RPC request.

        Args:
            method: RPC method name, e.g. "eth_call"
            params: Positional parameters

        Returns:
            The response's result member

        Raises:
            RpcError: If the node returns an error or a null result
        """
        if params is None:
            params = []

        logger.debug(f"RPC request: {method} {params}")
        response = self.retry_with_backoff(
            self.w3.provider.make_request, method, params
        )
        return self._unwrap(method, response)

    def batch(self, calls: list[tuple[str, list[Any]]]) -> list[dict[str, Any]]:
        """
        Send several JSON-RPC requests in one batch.

        Args:
            calls: (method, params) pairs

        Returns:
            Raw responses, ordered like the requests

        Raises:
            RpcError: If the node rejects the batch as a whole
        """
        if not calls:
            return []

        logger.debug(f"RPC batch of {len(calls)} requests")
        responses = self.retry_with_backoff(
            self.w3.provider.make_batch_request, calls
        )

        if isinstance(responses, dict):
            raise RpcError.from_response(responses.get("error", responses))

        return sorted(responses, key=lambda response: response.get("id") or 0)

    def batch_results(self, calls: list[tuple[str, list[Any]]]) -> list[Any]:
        """
        Send a batch and unwrap every response.

        Raises:
            RpcError: If any response carries an error or a null result
        """
        responses = self.batch(calls)
        if len(responses) != len(calls):
            raise RpcError(
                f"Batch returned {len(responses)} responses for {len(calls)} requests"
            )
        return [
            self._unwrap(method, response)
            for (method, _), response in zip(calls, responses)
        ]
