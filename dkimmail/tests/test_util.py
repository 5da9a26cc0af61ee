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

import logging
import unittest

from dkimmail.util import (
    get_default_logger,
    wrap,
    )


class TestWrap(unittest.TestCase):

    def test_short(self):
        self.assertEqual('abc', wrap('abc'))

    def test_exact_width(self):
        self.assertEqual('a' * 64, wrap('a' * 64))

    def test_long(self):
        self.assertEqual(
            'a' * 64 + '\r\n\t' + 'b' * 64 + '\r\n\t' + 'c',
            wrap('a' * 64 + 'b' * 64 + 'c'))

    def test_no_trailing_separator(self):
        self.assertFalse(wrap('a' * 128).endswith('\t'))

    def test_custom_width_and_separator(self):
        self.assertEqual('ab-cd-e', wrap('abcde', 2, '-'))

    def test_empty(self):
        self.assertEqual('', wrap(''))


class TestDefaultLogger(unittest.TestCase):

    def test_name(self):
        self.assertEqual('dkimmail', get_default_logger().name)

    def test_single_null_handler(self):
        logger = get_default_logger()
        get_default_logger()
        nulls = [h for h in logger.handlers
            if isinstance(h, logging.NullHandler)]
        self.assertEqual(1, len(nulls))


def test_suite():
    from unittest import TestLoader
    return TestLoader().loadTestsFromName(__name__)
