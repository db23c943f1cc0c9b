# Copyright 2025 Jesse Bate (https://github.com/jbatesy)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exceptions raised by the http_types model and codec.
"""

from typing import Optional


class HttpTypesError(ValueError):
    """
    Base class for all http_types errors.

    Attributes:
        line: 1-based line number when the error came from JSON Lines input
    """

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


class MalformedInputError(HttpTypesError):
    """
    Raised when JSON input is missing a required field or has the wrong shape.

    Attributes:
        field: Name of the offending JSON field, if known
        path: JSON path of the offending field (e.g. ``$.response.statusCode``)
        line: 1-based line number when reading JSON Lines input
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ):
        super().__init__(message, line=line)
        self.field = field
        self.path = path


class UnrecognizedEnumValueError(HttpTypesError):
    """Raised when a method or protocol string matches no known value."""

    def __init__(self, value: str, enum_name: str):
        super().__init__(f"Unrecognized {enum_name} value: {value!r}")
        self.value = value
        self.enum_name = enum_name


class InvalidArgumentError(HttpTypesError):
    """Raised when a builder is given an invalid value or is missing a required one."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DecodeError(HttpTypesError):
    """Raised when percent-decoding or UTF-8 decoding fails."""
    pass
