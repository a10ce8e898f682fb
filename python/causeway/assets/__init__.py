"""Root and child token models."""

from causeway.assets.tokens import (
    FungibleToken,
    NonFungibleToken,
    MintableNonFungibleToken,
    MultiToken,
    NativeCurrency,
)
from causeway.assets.child_tokens import (
    ChildFungible,
    ChildNonFungible,
    ChildMintableNonFungible,
    ChildMultiToken,
)

__all__ = [
    "FungibleToken",
    "NonFungibleToken",
    "MintableNonFungibleToken",
    "MultiToken",
    "NativeCurrency",
    "ChildFungible",
    "ChildNonFungible",
    "ChildMintableNonFungible",
    "ChildMultiToken",
]
