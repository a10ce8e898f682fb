"""Per-asset-class custody predicates."""

from causeway.predicates.base import TokenPredicate
from causeway.predicates.fungible import FungiblePredicate
from causeway.predicates.non_fungible import NonFungiblePredicate
from causeway.predicates.mintable import MintableNonFungiblePredicate
from causeway.predicates.multi_token import MultiTokenPredicate
from causeway.predicates.native import NativeCurrencyPredicate

PREDICATES: dict = {
    cls.asset_type: cls
    for cls in (
        FungiblePredicate,
        NonFungiblePredicate,
        MintableNonFungiblePredicate,
        MultiTokenPredicate,
        NativeCurrencyPredicate,
    )
}

__all__ = [
    "TokenPredicate",
    "FungiblePredicate",
    "NonFungiblePredicate",
    "MintableNonFungiblePredicate",
    "MultiTokenPredicate",
    "NativeCurrencyPredicate",
    "PREDICATES",
]
