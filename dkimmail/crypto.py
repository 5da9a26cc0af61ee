# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the author be held liable for any damages
# arising from the use of this software.
#
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
#
# 1. The origin of this software must not be misrepresented; you must not
#    claim that you wrote the original software. If you use this software
#    in a product, an acknowledgment in the product documentation would be
#    appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
#    misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.
#
# Copyright (c) 2008 Greg Hewgill http://hewgill.com
#
# This has been modified from the original software.

__all__ = [
    'parse_pem_private_key',
    'RSASSA_PKCS1_v1_5_sign',
    'SigningFailedError',
    'UnparsableKeyError',
    ]

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


class UnparsableKeyError(Exception):
    """The data could not be parsed as a key."""
    pass


class SigningFailedError(Exception):
    """The RSA primitive refused to produce a signature."""
    pass


def _to_bytes(data, encoding='ascii'):
    if isinstance(data, str):
        return data.encode(encoding)
    return data


def parse_pem_private_key(data, passphrase=None):
    """Parse a PEM RSA private key.

    @param data: PKCS#1 or PKCS#8 private key in PEM format, optionally
        encrypted.
    @param passphrase: passphrase protecting the key; None or empty for an
        unencrypted key.
    @return: RSA private key
    """
    password = _to_bytes(passphrase, 'utf-8') or None
    try:
        pk = serialization.load_pem_private_key(
            _to_bytes(data), password=password, backend=default_backend())
    except (ValueError, TypeError, UnicodeEncodeError,
            UnsupportedAlgorithm) as e:
        raise UnparsableKeyError(str(e))
    if not isinstance(pk, rsa.RSAPrivateKey):
        raise UnparsableKeyError("Private key is not an RSA key")
    return pk


def RSASSA_PKCS1_v1_5_sign(message, private_key):
    """Sign a message with RFC3447 RSASSA-PKCS1-v1_5 and SHA-256.

    @param message: byte string to sign
    @param private_key: RSA private key, as returned by
        L{parse_pem_private_key}
    @return: signature byte string
    """
    try:
        return private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    except (ValueError, TypeError, AttributeError) as e:
        raise SigningFailedError(str(e))
