"""Exception types raised by the bridge.

Every failure aborts the call that raised it; the ledger reverts any state
the call touched before the exception reaches the caller.
"""


class BridgeError(Exception):
    """Base class for all bridge failures."""


class InvalidProof(BridgeError):
    """Checkpoint or trie inclusion failed, or the proof is malformed."""


class IndexOutOfRange(InvalidProof):
    """Requested log index does not exist in the receipt."""


class AlreadyExited(BridgeError):
    """The burn referenced by this proof has already been redeemed."""


class UnregisteredAsset(BridgeError):
    """Asset, asset type, predicate or token mapping is not registered."""


class UnsupportedNoticeType(BridgeError):
    """Inbound notice carries a tag the receiver does not handle."""


class RegistryConflict(BridgeError):
    """A write-once registry entry was registered again with another value."""


class InsufficientPermissions(BridgeError):
    """Caller lacks the role required for the operation."""


class InvalidSignature(BridgeError):
    """Log topic 0 is not the burn event this predicate accepts."""


class InvalidWithdrawSignature(InvalidSignature):
    """Multi-token log is neither a single nor a batch transfer."""


class InvalidSender(BridgeError):
    """Burn log was not emitted on behalf of the withdrawer."""


class InvalidReceiver(BridgeError):
    """Burn log does not send to the zero address."""


class InsufficientCustody(BridgeError):
    """Predicate does not hold what the exit claims.

    Reachable only through a forged proof that slipped past verification.
    """


class TransferRejected(BridgeError):
    """Asset refused a transfer (balance, ownership or approval)."""
