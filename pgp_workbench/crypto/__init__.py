"""
Cryptographic collaborator for the PGP workbench.

This module provides:
- The PGPBackend protocol the workflows call
- A pgpy implementation of it
- Zeroable buffers for secret text
"""

from pgp_workbench.crypto.pgpy_backend import PgpyBackend, PgpyKey
from pgp_workbench.crypto.protocol import KeyMaterial, PGPBackend
from pgp_workbench.crypto.secure_buffer import SecureBuffer

__all__ = [
    "SecureBuffer",
    "PGPBackend",
    "KeyMaterial",
    "PgpyBackend",
    "PgpyKey",
]
