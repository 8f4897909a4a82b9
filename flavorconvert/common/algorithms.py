import enum
from typing import Optional


class Hash(str, enum.Enum):
    # Bank names as used by the HVS flavor schemas, lower cased
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SM3_256 = "sm3_256"

    @staticmethod
    def is_recognized(algorithm: str) -> bool:
        return Hash.from_bank(algorithm) is not None

    @staticmethod
    def from_bank(bank: str) -> Optional["Hash"]:
        """Return the hash algorithm of a PCR bank name such as 'SHA256', or None"""
        try:
            return Hash(bank.lower().replace("-", ""))
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


def same_bank(bank: str, other: str) -> bool:
    """Check whether two PCR bank names refer to the same hash algorithm

    Unrecognized names only match themselves.
    """
    if not (Hash.is_recognized(bank) and Hash.is_recognized(other)):
        return bank == other
    return Hash.from_bank(bank) == Hash.from_bank(other)
