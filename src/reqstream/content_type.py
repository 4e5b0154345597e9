"""
Content-Type header parsing.

A ``ContentType`` splits a header such as ``text/html; charset=UTF-8``
into a lowercased mime type and a mapping of lowercased parameter
names to values.
"""

from typing import Dict, Optional


class ContentType:
    """Parsed representation of a Content-Type header."""

    def __init__(self, header: Optional[str] = None) -> None:
        self._mime_type = ""
        self._params: Dict[str, str] = {}

        if header:
            for part in str(header).split(";"):
                subpart = part.split("=")
                if len(subpart) == 1:
                    # Only the first bare segment is the mime type
                    if subpart[0].strip() and not self._mime_type:
                        self._mime_type = subpart[0].strip().lower()
                elif len(subpart) == 2:
                    self._params[subpart[0].strip().lower()] = subpart[1].strip()

    @classmethod
    def parse(cls, header: Optional[str]) -> "ContentType":
        return cls(header)

    @property
    def mime_type(self) -> str:
        return self._mime_type

    @property
    def params(self) -> Dict[str, str]:
        return dict(self._params)

    def set_mime_type(self, mime_type: str) -> "ContentType":
        self._mime_type = str(mime_type).lower()
        return self

    def get_param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a parameter value by name (case-insensitive)."""
        return self._params.get(str(name).lower(), default)

    def set_param(self, name: str, value: str) -> "ContentType":
        self._params[str(name).lower()] = str(value)
        return self

    def serialize(self) -> str:
        content = self._mime_type
        for name, value in self._params.items():
            content += f";{name}={value}"
        return content

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"ContentType({self.serialize()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentType):
            return NotImplemented
        return self._mime_type == other._mime_type and self._params == other._params
