"""
Passphrase-based authenticated encryption for spid state files.

Key derivation uses scrypt (N=16384, r=8, p=1, 32-byte output) over a fresh
random salt. Encryption uses NaCl's secretbox construction
(XSalsa20-Poly1305) with a fresh random 24-byte nonce. Nonce and salt are
drawn independently for every seal, so no (key, nonce) pair ever repeats.

Container layout (EncryptedContainer.to_bytes):
    MAGIC (4) || VERSION (1) || ciphertext length (4, big-endian)
    || ciphertext (includes the 16-byte Poly1305 tag) || nonce (24) || salt (24)
"""

from dataclasses import dataclass

import nacl.secret
import nacl.utils
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from nacl.exceptions import CryptoError

from spid.exceptions import AuthenticationError

# scrypt work parameters; fixed for every file ever written
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
KEY_SIZE = nacl.secret.SecretBox.KEY_SIZE       # 32 bytes

NONCE_SIZE = nacl.secret.SecretBox.NONCE_SIZE   # 24 bytes
SALT_SIZE = 24


@dataclass(frozen=True)
class EncryptedContainer:
    """
    Sealed state with everything needed to open it except the passphrase.
    """
    ciphertext: bytes
    nonce: bytes
    salt: bytes

    MAGIC = b"SPID"
    VERSION = 1
    _HEADER_SIZE = len(MAGIC) + 1 + 4

    def to_bytes(self) -> bytes:
        """Serialize for storage."""
        return (
            self.MAGIC
            + bytes([self.VERSION])
            + len(self.ciphertext).to_bytes(4, "big")
            + self.ciphertext
            + self.nonce
            + self.salt
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedContainer":
        """
        Parse a serialized container.

        A container that does not parse has not been authenticated either,
        so every malformation is reported as AuthenticationError.
        """
        if len(data) < cls._HEADER_SIZE + NONCE_SIZE + SALT_SIZE:
            raise AuthenticationError("State file is truncated or not a spid database")
        if data[:len(cls.MAGIC)] != cls.MAGIC or data[len(cls.MAGIC)] != cls.VERSION:
            raise AuthenticationError("State file is not a spid database")

        length = int.from_bytes(data[len(cls.MAGIC) + 1:cls._HEADER_SIZE], "big")
        if len(data) != cls._HEADER_SIZE + length + NONCE_SIZE + SALT_SIZE:
            raise AuthenticationError("State file is truncated or not a spid database")

        nonce_offset = cls._HEADER_SIZE + length
        salt_offset = nonce_offset + NONCE_SIZE
        return cls(
            ciphertext=data[cls._HEADER_SIZE:nonce_offset],
            nonce=data[nonce_offset:salt_offset],
            salt=data[salt_offset:],
        )


class CryptoBox:
    """
    Seals and opens byte strings under a human-chosen passphrase.

    The passphrase is the only secret. It is used for a single key derivation
    per call and never stored.
    """

    @staticmethod
    def derive_key(passphrase: str, salt: bytes) -> bytes:
        """
        Derive a 256-bit key from a passphrase with scrypt.

        Args:
            passphrase: The user's passphrase (encoded as UTF-8).
            salt: Random salt stored alongside the ciphertext.

        Returns:
            32 bytes of key material.
        """
        kdf = Scrypt(salt=salt, length=KEY_SIZE, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
        return kdf.derive(passphrase.encode("utf-8"))

    def seal(self, plaintext: bytes, passphrase: str) -> EncryptedContainer:
        """
        Encrypt and authenticate ``plaintext``.

        Returns:
            An EncryptedContainer holding a fresh nonce and a fresh salt.
        """
        nonce = nacl.utils.random(NONCE_SIZE)
        salt = nacl.utils.random(SALT_SIZE)
        box = nacl.secret.SecretBox(self.derive_key(passphrase, salt))
        ciphertext = box.encrypt(plaintext, nonce).ciphertext
        return EncryptedContainer(ciphertext=ciphertext, nonce=nonce, salt=salt)

    def open(self, container: EncryptedContainer, passphrase: str) -> bytes:
        """
        Authenticate and decrypt a container.

        Raises:
            AuthenticationError: On a wrong passphrase or any tampering. The
                message is the same in both cases and no plaintext is
                returned.
        """
        if len(container.nonce) != NONCE_SIZE or len(container.salt) != SALT_SIZE:
            raise AuthenticationError()

        box = nacl.secret.SecretBox(self.derive_key(passphrase, container.salt))
        try:
            return box.decrypt(container.ciphertext, container.nonce)
        except CryptoError:
            raise AuthenticationError() from None
