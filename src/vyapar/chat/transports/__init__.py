from .edge import EdgeFunctionTransport
from .openai import OpenAITransport

__all__ = ["EdgeFunctionTransport", "OpenAITransport"]
