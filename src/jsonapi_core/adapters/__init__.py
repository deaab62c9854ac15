from jsonapi_core.adapters.memory import InMemoryAdapter

__all__ = ["InMemoryAdapter"]
