from .encoder import NO_RESPONSE_MESSAGE, STREAM_ERROR_MESSAGE, RelayEncoder

__all__ = ["NO_RESPONSE_MESSAGE", "STREAM_ERROR_MESSAGE", "RelayEncoder"]
