from enum import Enum
from typing import Iterable

from cryptography.hazmat.primitives import hashes


class HashType(Enum):
    MD5 = {
        "name": "MD5",
        "algorithm": hashes.MD5
    }
    SHA1 = {
        "name": "SHA1",
        "algorithm": hashes.SHA1
    }
    SHA256 = {
        "name": "SHA256",
        "algorithm": hashes.SHA256
    }
    SHA512 = {
        "name": "SHA512",
        "algorithm": hashes.SHA512
    }
    SHA3_512 = {
        "name": "SHA3_512",
        "algorithm": hashes.SHA3_512
    }
    BLAKE2B = {
        "name": "BLAKE2B",
        "algorithm": lambda: hashes.BLAKE2b(64)
    }


__hashtypes = {x.name: x.value for x in HashType}


def hash_list() -> Iterable[str]:
    return iter(__hashtypes)


def get_hashtype(hashfunc: str):
    try:
        return __hashtypes[hashfunc.upper()]
    except KeyError:
        raise ValueError(f"Invalid hash function '{hashfunc}'. Must be one of {' '.join(hash_list())}.")


class Hasher:
    """
    A write-only stream that feeds everything written to it into a hash function.
    """

    def __init__(self, hashfunc: str = "SHA256"):
        hashtype = get_hashtype(hashfunc)
        self.name = hashtype["name"]
        self.__ctx = hashes.Hash(hashtype["algorithm"]())

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        self.__ctx.update(bytes(data))
        return len(data)

    def flush(self):
        pass

    def finalize(self) -> bytes:
        return self.__ctx.finalize()

    def __repr__(self) -> str:
        return f"Hasher({self.name!r})"


def hash_bytes(data, hashfunc: str = "SHA256") -> bytes:
    hasher = Hasher(hashfunc)
    hasher.write(data)
    return hasher.finalize()
