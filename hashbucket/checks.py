# -*- coding: utf-8 -*-
"""Content policies passed to :meth:`hashbucket.Bucket.save`.

A policy is any callable taking ``(content_type, size)`` that raises to reject
a file.
"""

from .errors import FileSizeError, FileTypeError, normalize_lang

#: Default upper bound for image uploads.
MAX_IMAGE_SIZE = 2 * (1 << 20)


class ImageChecker(object):
    """Accept images no larger than `max_size` bytes, rejecting anything
    else with an error localized for `lang`.
    """

    def __init__(self, lang=None, max_size=MAX_IMAGE_SIZE):
        self.lang = normalize_lang(lang)
        self.max_size = max_size

    def __call__(self, content_type, size):
        self.check(content_type, size)

    def check(self, content_type, size):
        if not content_type.startswith("image/"):
            raise FileTypeError(content_type, lang=self.lang)
        if size > self.max_size:
            raise FileSizeError(size, self.max_size, lang=self.lang)


def accept_all(content_type, size):
    """Policy accepting every file."""
