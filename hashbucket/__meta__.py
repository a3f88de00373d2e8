# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "hashbucket"
__summary__ = (
    "A content-addressable file store with a transactional link ledger "
    "and replica machines."
)

__version__ = "0.1.0"

__install_requires__ = [
    "fsspec>=2023.1.0",
    "psutil>=5.9",
    "pydantic>=2.0",
    "SQLAlchemy>=2.0",
]
__tests_require__ = ["pytest"]

__author__ = "hashbucket contributors"

__license__ = "MIT License"
