"""Transport wrappers that callers can plug into a client.

Example:
    ```python
    from vila.transport import RetryPolicy, RetryTransport

    transport = RetryTransport(wrapped_transport=httpx.AsyncHTTPTransport(), policy=RetryPolicy())
    ```
"""

from vila.transport.retry import RetryPolicy, RetryTransport

__all__ = ["RetryPolicy", "RetryTransport"]
