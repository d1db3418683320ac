"""Model service client."""

from tinychat.providers.client import END_OF_STREAM, ModelServiceClient

__all__ = ["END_OF_STREAM", "ModelServiceClient"]
