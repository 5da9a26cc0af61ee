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

import io
import os
import shutil
import tempfile
import unittest

import dkimmail
from dkimmail.dkimsign import main, split_message
from dkimmail.tests.test_dkim import private_pem, tag_values, verify


MESSAGE = """\
From: a@x.com
To: b@y.com
Subject: this is my
    test message
X-Mailer: test

Hello
""".replace('\n', '\r\n')


class TestSplitMessage(unittest.TestCase):

    def test_split(self):
        to, subject, headers, body = split_message(MESSAGE)
        self.assertEqual('b@y.com', to)
        self.assertEqual('this is my\r\n    test message', subject)
        self.assertEqual('From: a@x.com\r\nX-Mailer: test\r\n', headers)
        self.assertEqual('Hello\r\n', body)

    def test_missing_subject(self):
        self.assertRaises(
            dkimmail.MessageFormatError, split_message,
            'From: a@x.com\r\nTo: b@y.com\r\n\r\nHello\r\n')

    def test_bad_header(self):
        self.assertRaises(
            dkimmail.MessageFormatError, split_message,
            'Bogus header line\r\n\r\n')


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.keyfile = os.path.join(self.tmpdir, 'test.private')
        with open(self.keyfile, 'wb') as f:
            f.write(private_pem('secret'))

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def run_main(self, *args):
        stdout = io.StringIO()
        stderr = io.StringIO()
        status = main(list(args), io.StringIO(MESSAGE), stdout, stderr)
        return status, stdout.getvalue(), stderr.getvalue()

    def test_signs(self):
        status, out, err = self.run_main(
            'test', 'x.com', self.keyfile, '--passphrase', 'secret')
        self.assertEqual(0, status)
        self.assertEqual('', err)
        sig, message = out.split('\r\nFrom: ', 1)
        sig += '\r\n'
        self.assertEqual('From: ' + message, MESSAGE)
        self.assertEqual('from:to:subject', tag_values(sig)['h'])
        verify(sig, ['from:a@x.com', 'to:b@y.com',
            'subject:this is my test message'])

    def test_header_option(self):
        status, out, err = self.run_main(
            'test', 'x.com', self.keyfile, '--passphrase', 'secret',
            '--header', 'X-Mailer', '--header', 'From')
        self.assertEqual(0, status)
        self.assertEqual('from:x-mailer', tag_values(out.split('\r\nFrom: ')[0])['h'])

    def test_bad_passphrase_writes_unsigned_message(self):
        status, out, err = self.run_main(
            'test', 'x.com', self.keyfile, '--passphrase', 'wrong')
        self.assertEqual(1, status)
        self.assertEqual(MESSAGE, out)
        self.assertNotEqual('', err)

    def test_missing_key_file(self):
        status, out, err = self.run_main(
            'test', 'x.com', os.path.join(self.tmpdir, 'missing'))
        self.assertEqual(1, status)
        self.assertEqual(MESSAGE, out)


def test_suite():
    from unittest import TestLoader
    return TestLoader().loadTestsFromName(__name__)
