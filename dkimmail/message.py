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

"""Compose RFC 5322/MIME messages, optionally DKIM signed, and send them."""

import base64
import mimetypes
import os.path
import re
import smtplib
import uuid
from email.utils import formatdate, make_msgid
from urllib.parse import urlparse

from dkimmail import (
    AddressError,
    MessageFormatError,
    TransportError,
    ensure_crlf,
    )
from dkimmail.util import get_default_logger

__all__ = [
    'Address',
    'Message',
    'SMTPTransport',
    ]

RE_ADDR_SPEC = re.compile(
    r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\Z")
RE_LINE_BREAK = re.compile(r"[\r\n]")


def _single_line(value, what):
    if value is not None and RE_LINE_BREAK.search(value):
        raise MessageFormatError("%s must not contain line breaks: %r"
            % (what, value))
    return value


class Address(object):
    """An email address along with the optional name of its owner.

    >>> str(Address('jane@example.com', 'Jane Doe'))
    'Jane Doe <jane@example.com>'
    >>> str(Address('jane@example.com'))
    'jane@example.com'
    """

    __slots__ = ('email', 'name')

    def __init__(self, email, name=None):
        if not isinstance(email, str) or not RE_ADDR_SPEC.match(email):
            raise AddressError("Email address is invalid: %r" % (email,))
        object.__setattr__(self, 'email', email)
        if name is not None and RE_LINE_BREAK.search(name):
            raise AddressError("Address name is invalid: %r" % (name,))
        object.__setattr__(self, 'name', name)

    def __setattr__(self, name, value):
        raise AttributeError("Address is immutable")

    def __str__(self):
        if self.name:
            return "%s <%s>" % (self.name, self.email)
        return self.email

    def __repr__(self):
        return "Address(%r, %r)" % (self.email, self.name)

    def __eq__(self, other):
        if not isinstance(other, Address):
            return NotImplemented
        return (self.email, self.name) == (other.email, other.name)

    def __hash__(self):
        return hash((self.email, self.name))


def _addresses(value, field):
    if value is None:
        return ()
    if isinstance(value, Address):
        return (value,)
    value = tuple(value)
    for a in value:
        if not isinstance(a, Address):
            raise AddressError("%s expects Address instances, got %r"
                % (field, a))
    return value


def _address(value, field):
    if value is not None and not isinstance(value, Address):
        raise AddressError("%s expects an Address, got %r" % (field, value))
    return value


class Message(object):
    """A mail message, validated when built and not modified afterwards.

    The headers produced by L{headers} are the draft block handed to a
    L{dkimmail.DKIMSigner}: To and Subject are kept apart and only added
    by the signer and the transport.
    """

    def __init__(self, subject, body, to, sender_from=None, sender=None,
            reply_to=None, cc=(), bcc=(), content_type=None, charset=None,
            date=None, message_id_domain=None, unsubscribe_email=None,
            unsubscribe_url=None, custom_headers=(), attachments=(),
            dkim=None):
        self.subject = _single_line(subject, "Subject")
        self.message = body
        self.to = _addresses(to, "to")
        if not self.to:
            raise MessageFormatError(
                "You must add at least one recipient to mail message")
        self.sender_from = _address(sender_from, "sender_from")
        self.sender = _address(sender, "sender")
        self.reply_to = _address(reply_to, "reply_to")
        self.cc = _addresses(cc, "cc")
        self.bcc = _addresses(bcc, "bcc")
        self.content_type = content_type
        self.charset = charset or "utf-8"
        self.date = date
        self.message_id = None
        if message_id_domain:
            self.message_id = make_msgid(domain=message_id_domain)
        self.unsubscribe = self._unsubscribe(unsubscribe_email, unsubscribe_url)
        self.custom_headers = tuple(
            "%s: %s" % (_single_line(name, "Header name"),
                _single_line(value, "Header value"))
            for name, value in custom_headers)
        self.attachments = tuple(attachments)
        for path in self.attachments:
            if not os.path.isfile(path):
                raise MessageFormatError(
                    "Attached file doesn't exist: %s" % path)
        self.dkim = dkim

    @staticmethod
    def _unsubscribe(email, url):
        if email is None and url is None:
            return ()
        unsubscribe = []
        if email is not None:
            if not RE_ADDR_SPEC.match(email):
                raise AddressError("Email address is invalid: %r" % (email,))
            unsubscribe.append("mailto:" + email)
        if url is not None:
            parts = urlparse(url)
            if not (parts.scheme and parts.netloc):
                raise MessageFormatError("Url is invalid: %r" % (url,))
            unsubscribe.append(url)
        return tuple(unsubscribe)

    def recipients(self):
        """Return the envelope recipients: To, Cc and Bcc addresses."""
        return [a.email for a in self.to + self.cc + self.bcc]

    def envelope_sender(self):
        """Return the envelope sender address, empty when none is set."""
        for a in (self.sender, self.sender_from):
            if a is not None:
                return a.email
        return ""

    def headers(self, boundary):
        """Compile the draft header block, without To and Subject.

        Bcc recipients appear in the envelope only, never in a header.
        """
        headers = []
        if self.attachments:
            headers.append("MIME-Version: 1.0")
            headers.append(
                'Content-Type: multipart/mixed; boundary="%s"' % boundary)
            headers.append("Content-Transfer-Encoding: 7bit")
        elif self.content_type:
            headers.append("MIME-Version: 1.0")
            headers.append('Content-Type: %s; charset="%s"'
                % (self.content_type, self.charset))
        headers.append("Date: " + formatdate(self.date, localtime=True))
        if self.message_id:
            headers.append("Message-ID: " + self.message_id)
        if self.unsubscribe:
            headers.append("List-Unsubscribe: " + ", ".join(
                "<%s>" % x for x in self.unsubscribe))
            headers.append("List-Unsubscribe-Post: List-Unsubscribe=One-Click")
        if self.sender_from is not None:
            headers.append("From: %s" % self.sender_from)
        if self.sender is not None:
            headers.append("Sender: %s" % self.sender)
        if self.reply_to is not None:
            headers.append("Reply-To: %s" % self.reply_to)
        if self.cc:
            headers.append("Cc: " + ",".join(str(a) for a in self.cc))
        headers.extend(self.custom_headers)
        return "\r\n".join(headers)

    def body(self, boundary):
        """Compile the message body with CRLF line endings."""
        body = re.sub(r"(?<!\r)\n", "\r\n", self.message)
        if not self.attachments:
            return body
        parts = [
            "This is a MIME encoded message.",
            "--" + boundary,
            'Content-Type: %s; charset="%s"'
                % (self.content_type or "text/plain", self.charset),
            "Content-Transfer-Encoding: 8bit",
            "",
            body,
        ]
        for path in self.attachments:
            ctype = mimetypes.guess_type(path)[0] or "application/octet-stream"
            with open(path, "rb") as f:
                data = base64.encodebytes(f.read()).decode("ascii")
            parts.extend([
                "--" + boundary,
                'Content-Type: %s; name="%s"'
                    % (ctype, os.path.basename(path)),
                "Content-Transfer-Encoding: base64",
                "Content-Disposition: attachment",
                "",
                data.replace("\n", "\r\n"),
            ])
        parts.append("--" + boundary + "--")
        return "\r\n".join(parts)

    def compose(self):
        """Compile the message.

        @return: a (to, subject, headers, body) tuple.  When a DKIM signer
        is attached its DKIM-Signature header starts the header block.
        @raise SigningError: when the message cannot be signed; it is
        never sent unsigned.
        """
        boundary = uuid.uuid4().hex
        to = ",".join(str(a) for a in self.to)
        body = self.body(boundary)
        headers = self.headers(boundary)
        if self.dkim is not None:
            headers = self.dkim.sign(to, self.subject, body, headers) + headers
        return to, self.subject, headers, body

    def as_string(self):
        """Return the complete message text, ready for a transport."""
        to, subject, headers, body = self.compose()
        return (ensure_crlf(headers) + "To: " + to + "\r\n"
            + "Subject: " + subject + "\r\n\r\n" + body)

    def send(self, transport):
        """Compose the message and hand it to transport."""
        transport.send(self.envelope_sender(), self.recipients(),
            self.as_string())


class SMTPTransport(object):
    """Deliver composed messages to an SMTP server."""

    def __init__(self, host="localhost", port=25, timeout=None, logger=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        if logger is None:
            logger = get_default_logger()
        self.logger = logger

    def connect(self):
        if self.timeout is None:
            return smtplib.SMTP(self.host, self.port)
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def send(self, sender, recipients, message):
        self.logger.debug("sending to %s:%d for %r"
            % (self.host, self.port, recipients))
        try:
            with self.connect() as smtp:
                refused = smtp.sendmail(
                    sender, recipients, message.encode("utf-8"))
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError("Send failed: %s" % e) from e
        if refused:
            raise TransportError("Recipients refused: %s"
                % ", ".join(sorted(refused)))
