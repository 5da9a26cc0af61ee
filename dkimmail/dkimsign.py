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

import argparse
import sys

import dkimmail

DEFAULT_HEADERS = ['from', 'to', 'subject', 'date', 'message-id']


def split_message(message):
    """Split a message into (to, subject, draft headers, body).

    The draft keeps every header field except To and Subject, which
    DKIMSigner.sign appends itself.
    """
    headers, body = dkimmail.rfc822_parse(message)
    to = subject = None
    draft = []
    for name, value in headers:
        if name.lower() == 'to':
            to = value.strip()
        elif name.lower() == 'subject':
            subject = value.strip()
        else:
            draft.append(name + ':' + value)
    if to is None or subject is None:
        raise dkimmail.MessageFormatError(
            "Message must have both To and Subject header fields")
    return to, subject, ''.join(draft), body


def main(argv=None, stdin=None, stdout=None, stderr=None):
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    parser = argparse.ArgumentParser(description='Produce DKIM signature for email messages.')
    parser.add_argument('selector', action="store")
    parser.add_argument('domain', action="store")
    parser.add_argument('privatekeyfile', action="store")
    parser.add_argument('--passphrase', default='', help='Passphrase of the private key, if encrypted.')
    parser.add_argument('--header', action='append', dest='headers', metavar='NAME', help='Header field to sign; may be repeated. default=%s' % ','.join(DEFAULT_HEADERS))
    args = parser.parse_args(argv)

    message = stdin.read()
    try:
        with open(args.privatekeyfile, "rb") as f:
            privkey = f.read()
        signer = dkimmail.DKIMSigner(privkey, args.passphrase, args.domain,
            args.selector, args.headers or DEFAULT_HEADERS)
        to, subject, headers, body = split_message(message)
        sig = signer.sign(to, subject, body, headers)
    except (dkimmail.DKIMException, OSError) as e:
        print(e, file=stderr)
        stdout.write(message)
        return 1
    stdout.write(sig)
    stdout.write(message)
    return 0


if __name__ == '__main__':
    sys.exit(main())
