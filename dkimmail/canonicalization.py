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

import re
from collections import OrderedDict

__all__ = [
    'Relaxed',
    ]

# A line break followed by WSP continues the previous header line.
RE_FOLD = re.compile(r"\r?\n[\x09\x20]+")
WSP = "\x09\x20"
RE_WSP = re.compile(r"[\x09\x20]+")


class Relaxed:
    """Class that represents the "relaxed" canonicalization algorithm."""

    name = "relaxed"

    @staticmethod
    def canonicalize_headers(headers, include_headers):
        """Canonicalize a block of CRLF separated header lines.

        Only fields named in include_headers (lower case) or named
        DKIM-Signature are kept.  The result maps each lower case field
        name to its "name:value" line, ordered by first appearance; a
        repeated field replaces the earlier value.

        >>> h = Relaxed.canonicalize_headers(
        ...     'From: a@x.com\\r\\nX-Foo: bar\\r\\nSubject:  Hi\\r\\n there\\r\\n',
        ...     frozenset(['from', 'subject']))
        >>> list(h.values())
        ['from:a@x.com', 'subject:Hi there']
        """
        canonical = OrderedDict()
        # Unfold all header lines.
        headers = RE_FOLD.sub(" ", headers)
        for line in headers.split("\r\n"):
            # Compress WSP to single space.
            line = RE_WSP.sub(" ", line)
            if not line:
                continue
            name, _, value = line.partition(":")
            # Convert all header field names to lowercase.
            # Remove all WSP (SP and HTAB only) at the start or end of the field value.
            name = name.strip(WSP).lower()
            if name in include_headers or name == "dkim-signature":
                canonical[name] = name + ":" + value.strip(WSP)
        return canonical

    @staticmethod
    def canonicalize_body(body):
        """Canonicalize a CRLF separated message body.

        >>> Relaxed.canonicalize_body('')
        '\\r\\n'
        """
        # Remove all trailing WSP at end of lines.
        # Compress non-line-ending WSP to single space.
        lines = [RE_WSP.sub(" ", line.rstrip(WSP)) for line in body.split("\r\n")]
        body = "\r\n".join(lines)
        # Ignore all empty lines at the end of the message body.
        while body.endswith("\r\n\r\n"):
            body = body[:-2]
        if not body.endswith("\r\n"):
            body += "\r\n"
        return body
