"""Abstract base class for draw result providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lottoscan.schemas.lottery import Product
from lottoscan.schemas.results import LottoDrawResult, PensionDrawResult


class ProviderError(Exception):
    """Error communicating with or processing data from a provider."""

    def __init__(self, provider: str, detail: str, retriable: bool = False) -> None:
        self.provider = provider
        self.detail = detail
        self.retriable = retriable
        super().__init__(f"[{provider}] {detail}")


class ResultsProvider(ABC):
    """Source of authoritative draw results.

    Implementations own the transport. ``fetch`` returns ``None`` when the
    round is not published (yet) and raises :class:`ProviderError` when the
    source cannot be reached or answers with garbage.
    """

    provider_name: str = ""

    @abstractmethod
    def fetch(
        self,
        product: Product,
        round_no: int,
    ) -> LottoDrawResult | PensionDrawResult | None:
        """Fetch the official result for *round_no* of *product*."""
