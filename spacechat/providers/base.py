from abc import ABC, abstractmethod
from typing import Any, Optional


class StoreError(RuntimeError):
    pass


class GatewayError(RuntimeError):
    pass


class KeyValueStore(ABC):
    """
    Minimal JSON key-value contract.
    No compare-and-swap: concurrent read-modify-write is last-writer-wins.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def list(self, prefix: str = "") -> list[str]:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class TextCompletionGateway(ABC):
    @abstractmethod
    def complete(
        self,
        prompt: str,
        max_tokens: int = 256,
        temperature: float = 0.3,
        system: Optional[str] = None,
    ) -> str:
        """Return generated text or raise GatewayError."""
        ...
