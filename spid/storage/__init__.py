"""Encrypted state persistence package for spid.

This package contains the components that turn a SentinelState into a sealed
file and back:
- StateCodec: Lossless SentinelState <-> bytes serialization.
- CryptoBox: scrypt key derivation and XSalsa20-Poly1305 sealing.
- EncryptedContainer: The on-disk nonce/salt/ciphertext record.
- StateStore: Atomic save and load of a state file.
"""

from spid.storage.crypto_box import CryptoBox, EncryptedContainer
from spid.storage.state_codec import StateCodec
from spid.storage.state_store import StateStore

__all__ = ["CryptoBox", "EncryptedContainer", "StateCodec", "StateStore"]
