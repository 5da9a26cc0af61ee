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

import base64
import hashlib
import re
import time

from dkimmail.canonicalization import Relaxed
from dkimmail.crypto import (
    parse_pem_private_key,
    RSASSA_PKCS1_v1_5_sign,
    SigningFailedError,
    UnparsableKeyError,
    )
from dkimmail.util import (
    get_default_logger,
    wrap,
    )

__all__ = [
    "DKIMException",
    "KeyFormatError",
    "SigningError",
    "NoSignableHeadersError",
    "SignatureComputationError",
    "MessageFormatError",
    "AddressError",
    "TransportError",
    "DKIMSigner",
    "rfc822_parse",
    "sign",
]

class DKIMException(Exception):
    """Base class for DKIM errors."""
    pass

class KeyFormatError(DKIMException):
    """Key format error while loading or decrypting an RSA private key."""
    pass

class SigningError(DKIMException):
    """A DKIM-Signature header could not be produced."""
    pass

class NoSignableHeadersError(SigningError):
    """None of the headers to sign are present in the message."""
    pass

class SignatureComputationError(SigningError):
    """The RSA signing primitive refused the operation."""
    pass

class MessageFormatError(DKIMException):
    """RFC822 message format error."""
    pass

class AddressError(MessageFormatError):
    """Invalid email address."""
    pass

class TransportError(DKIMException):
    """The composed message could not be delivered."""
    pass


def ensure_crlf(text):
    """Terminate a non-empty block of lines with CRLF.

    >>> ensure_crlf('From: a@x.com')
    'From: a@x.com\\r\\n'
    >>> ensure_crlf('From: a@x.com\\r\\n')
    'From: a@x.com\\r\\n'
    >>> ensure_crlf('')
    ''
    """
    if text and not text.endswith("\r\n"):
        text += "\r\n"
    return text


def rfc822_parse(message):
    """Parse a message in RFC822 format.

    @param message: The message in RFC822 format. Either CRLF or LF is an accepted line separator.
    @return: Returns a tuple of (headers, body) where headers is a list of [name, value] pairs,
    each value keeping its folding and a trailing CRLF.  The body is a CRLF-separated string.

    >>> rfc822_parse('Subject: a\\n  b\\nTo: x@y.com\\n\\nHi\\n')
    ([['Subject', ' a\\r\\n  b\\r\\n'], ['To', ' x@y.com\\r\\n']], 'Hi\\r\\n')
    """
    headers = []
    lines = re.split(r"\r?\n", message)
    i = 0
    while i < len(lines):
        if len(lines[i]) == 0:
            # End of headers, return what we have plus the body, excluding the blank line.
            i += 1
            break
        if lines[i][0] in ("\x09", "\x20"):
            if not headers:
                raise MessageFormatError(
                    "Continuation line before first header: %s" % lines[i])
            headers[-1][1] += lines[i] + "\r\n"
        else:
            m = re.match(r"([\x21-\x7e]+?):", lines[i])
            if m is not None:
                headers.append([m.group(1), lines[i][m.end(0):] + "\r\n"])
            elif lines[i].startswith("From "):
                pass
            else:
                raise MessageFormatError("Unexpected characters in RFC822 header: %s" % lines[i])
        i += 1
    return (headers, "\r\n".join(lines[i:]))


#: Produce relaxed/relaxed rsa-sha256 DKIM-Signature headers.
class DKIMSigner(object):

    #: Signature algorithm written to the a= tag.
    SIGNATURE_ALGORITHM = "rsa-sha256"

    #: Width at which bh= and b= values are wrapped.
    WRAP_WIDTH = 64

    #: Create a signer.  The key is loaded and decrypted immediately and the
    #: instance is never modified afterwards, so it can be shared between
    #: threads and reused for any number of messages.
    #:
    #: @param privkey: an RSA private key in PEM format
    #: @param passphrase: the passphrase protecting privkey ("" if none)
    #: @param domain: the DKIM domain value for the signature
    #: @param selector: the DKIM selector value for the signature
    #: @param include_headers: names of the header fields to sign
    #: @param logger: a logger to which debug info will be written (default None)
    #: @param clock: callable returning the current Unix time, used for t=
    #: @raise KeyFormatError: when the key cannot be loaded or decrypted
    def __init__(self, privkey, passphrase, domain, selector, include_headers,
            logger=None, clock=time.time):
        try:
            self.privkey = parse_pem_private_key(privkey, passphrase)
        except UnparsableKeyError as e:
            raise KeyFormatError(str(e)) from e
        self.domain = domain
        self.selector = selector
        self.include_headers = frozenset(x.lower() for x in include_headers)
        if logger is None:
            logger = get_default_logger()
        self.logger = logger
        self.clock = clock

    def canonicalize_headers(self, headers):
        """Return the relaxed canonical form of the fields to sign."""
        return Relaxed.canonicalize_headers(headers, self.include_headers)

    def body_hash(self, body):
        """Return the wrapped base64 SHA-256 digest of the canonical body."""
        h = hashlib.sha256(Relaxed.canonicalize_body(body).encode('utf-8'))
        return wrap(base64.b64encode(h.digest()).decode('ascii'),
            self.WRAP_WIDTH)

    #: Build the DKIM-Signature header with an empty b= tag.
    #: @param include_headers: lower case names for the h= tag, in order
    #: @param bodyhash: the wrapped bh= value
    #: @param timestamp: the t= value
    def skeleton(self, include_headers, bodyhash, timestamp):
        sigfields = [
            ("v", "1"),
            ("a", self.SIGNATURE_ALGORITHM),
            ("q", "dns/txt"),
            ("s", self.selector),
            ("t", str(timestamp)),
            ("c", "relaxed/relaxed"),
            ("h", ":".join(include_headers)),
            ("d", self.domain),
            ("bh", bodyhash),
            ("b", ""),
        ]
        return "DKIM-Signature: " + ";\r\n\t".join(
            "=".join(x) for x in sigfields)

    #: Sign a message and return the DKIM-Signature header line.
    #:
    #: To and Subject header fields are appended to the draft headers before
    #: signing, so the draft must not contain them already.
    #:
    #: @param to: the To header field value (comma separated addresses)
    #: @param subject: the Subject header field value
    #: @param body: the message body with CRLF line endings
    #: @param headers: the draft header block, CRLF separated
    #: @return: DKIM-Signature header field terminated by '\\r\\n', to be
    #: prepended to headers
    #: @raise NoSignableHeadersError: when no header field to sign is present
    #: @raise SignatureComputationError: when the signature cannot be computed
    def sign(self, to, subject, body, headers):
        headers = ensure_crlf(headers)
        headers += "To: " + to + "\r\n"
        headers += "Subject: " + subject + "\r\n"

        canonical_headers = self.canonicalize_headers(headers)
        if not canonical_headers:
            raise NoSignableHeadersError("no headers to sign")
        self.logger.debug("sign headers: %r" % list(canonical_headers.values()))

        bodyhash = self.body_hash(body)
        self.logger.debug("bh: %s" % bodyhash)

        dkim_header = self.skeleton(
            canonical_headers.keys(), bodyhash, int(self.clock()))
        canonical_sig = self.canonicalize_headers(dkim_header)["dkim-signature"]

        # the dkim sig is hashed with no trailing crlf
        to_be_signed = "\r\n".join(
            list(canonical_headers.values()) + [canonical_sig])
        try:
            sig = RSASSA_PKCS1_v1_5_sign(
                to_be_signed.encode('utf-8'), self.privkey)
        except SigningFailedError as e:
            raise SignatureComputationError("signing failed") from e

        sig_value = wrap(base64.b64encode(sig).decode('ascii'), self.WRAP_WIDTH)
        return dkim_header + sig_value.rstrip() + "\r\n"


def sign(to, subject, body, headers, privkey, domain, selector,
         include_headers, passphrase="", logger=None):
    """Sign a message and return the DKIM-Signature header line.
    @param to: the To header field value
    @param subject: the Subject header field value
    @param body: the message body with CRLF line endings
    @param headers: the draft header block, without To and Subject
    @param privkey: an RSA private key in PEM format
    @param domain: the DKIM domain value for the signature
    @param selector: the DKIM selector value for the signature
    @param include_headers: a list of header names to sign
    @param passphrase: the passphrase protecting privkey (default none)
    @param logger: a logger to which debug info will be written (default None)
    @return: DKIM-Signature header field terminated by \\r\\n
    @raise DKIMException: when the key is unusable or nothing can be signed.
    """
    d = DKIMSigner(privkey, passphrase, domain, selector, include_headers,
        logger=logger)
    return d.sign(to, subject, body, headers)
