# -*- coding: utf-8 -*-
"""Exceptions raised by hashbucket.

Every caller-input problem derives from :class:`ArgsError` (also a
``ValueError``). Missing links and missing file records have their own codes.
Storage, transport and database errors are never wrapped.
"""

DEFAULT_LANG = "en"

_LANG_ALIASES = {
    "en": "en",
    "en-us": "en",
    "en_us": "en",
    "zh": "zh",
    "cn": "zh",
    "zh-cn": "zh",
    "zh_cn": "zh",
    "zh-hans": "zh",
}


def normalize_lang(lang):
    """Map a locale code to a supported message locale, falling back to
    :data:`DEFAULT_LANG`.
    """
    if not lang:
        return DEFAULT_LANG
    return _LANG_ALIASES.get(str(lang).strip().lower(), DEFAULT_LANG)


class HashBucketError(Exception):
    """Base class for hashbucket errors.

    Subclasses define ``code`` and a ``messages`` table of ``str.format``
    templates keyed by locale. Keyword arguments become ``params`` and are
    available to the templates.
    """

    code = "error"
    messages = {"en": "hashbucket error", "zh": "文件存储错误"}

    def __init__(self, lang=None, **params):
        self.lang = normalize_lang(lang)
        self.params = params
        super(HashBucketError, self).__init__(self.localized(self.lang))

    def localized(self, lang=None):
        """Return the error message rendered for `lang`."""
        template = self.messages.get(normalize_lang(lang), self.messages[DEFAULT_LANG])
        return template.format(**self.params)


class ArgsError(HashBucketError, ValueError):
    code = "args-err"
    messages = {"en": "invalid arguments", "zh": "参数错误"}


class EmptyObjectError(ArgsError):
    messages = {"en": "object is empty", "zh": "关联对象为空"}


class InvalidHashError(ArgsError):
    messages = {"en": "invalid file hash: {hashes}", "zh": "无效的文件哈希: {hashes}"}

    def __init__(self, hashes, lang=None):
        self.hashes = list(hashes)
        super(InvalidHashError, self).__init__(
            lang, hashes=", ".join(str(h) for h in self.hashes)
        )


class InvalidObjectError(ArgsError):
    messages = {"en": "invalid LinkObject: {value!r}", "zh": "无效的关联对象: {value!r}"}

    def __init__(self, value, lang=None):
        self.value = value
        super(InvalidObjectError, self).__init__(lang, value=value)


class InvalidFileError(ArgsError):
    messages = {
        "en": "file must be a readable object or an existing path: {value!r}",
        "zh": "文件必须是可读对象或已存在的路径: {value!r}",
    }

    def __init__(self, value, lang=None):
        self.value = value
        super(InvalidFileError, self).__init__(lang, value=value)


class NoFilesError(ArgsError):
    messages = {"en": "no files", "zh": "没有文件"}


class UnknownBucketError(ArgsError):
    messages = {"en": "unknown bucket: {name!r}", "zh": "未知的存储桶: {name!r}"}

    def __init__(self, name, lang=None):
        self.name = name
        super(UnknownBucketError, self).__init__(lang, name=name)


class FileTypeError(ArgsError):
    messages = {
        "en": "file type({type}) is not an image.",
        "zh": "文件类型({type})不是图片.",
    }

    def __init__(self, content_type, lang=None):
        self.content_type = content_type
        super(FileTypeError, self).__init__(lang, type=content_type)


class FileSizeError(ArgsError):
    messages = {
        "en": "file size({size:,}) can't exceed {limit}.",
        "zh": "文件大小({size:,})不能超过{limit}.",
    }

    def __init__(self, size, limit, lang=None):
        self.size = size
        self.limit = limit
        super(FileSizeError, self).__init__(lang, size=size, limit=format_size(limit))


class FileNotExistsError(HashBucketError, LookupError):
    code = "file-not-exists"
    messages = {
        "en": "some file not exists: {missing}",
        "zh": "部分文件不存在: {missing}",
    }

    def __init__(self, missing, lang=None):
        self.missing = list(missing)
        super(FileNotExistsError, self).__init__(lang, missing=", ".join(self.missing))


class NotLinkedError(HashBucketError, LookupError):
    code = "not-linked"
    messages = {
        "en": "the file is not linked to the object",
        "zh": "文件未关联到该对象",
    }


def is_not_linked(err):
    """Check if an error is the not linked error."""
    return isinstance(err, NotLinkedError)


def is_file_not_exists(err):
    """Check if an error is the file not exists error."""
    return isinstance(err, FileNotExistsError)


def format_size(size):
    """Format a byte count the way limits are quoted to users: ``2MB``."""
    for unit, scale in (("GB", 1 << 30), ("MB", 1 << 20), ("KB", 1 << 10)):
        if size >= scale and size % scale == 0:
            return "%d%s" % (size // scale, unit)
    return "%dB" % size
