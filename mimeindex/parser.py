"""Parse RFC 822 messages into a tree of MIME nodes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from email import errors as email_errors
from email import headerregistry
from typing import Any, Iterator

__all__ = [
    "Address",
    "MIMENode",
    "MIMEParseError",
    "MIMEParser",
    "ValueParams",
    "parse_addresses",
    "parse_mime",
    "parse_value_params",
]

_WS = "\t\n\f\r "
_LEADING_WS_RE = re.compile(f"[{_WS}]")
_FOLD_RE = re.compile(f"[{_WS}]*\r?\n[{_WS}]*")
_KEY_RE = re.compile(r"[a-zA-Z0-9\-*]")
_NEWLINE_RE = re.compile(rb"\r?\n")
_MAX_KEY_LENGTH = 100

_SINGLE_VALUE_FIELDS = (
    "content-transfer-encoding",
    "content-id",
    "content-description",
    "content-language",
    "content-md5",
    "content-location",
)
_ADDRESS_FIELDS = ("from", "sender", "reply-to", "to", "cc", "bcc")
_STRUCTURED_FIELDS = ("content-type", "content-disposition")

_HEADER_FACTORY = headerregistry.HeaderRegistry()


class MIMEParseError(ValueError):
    """Raised when the parser reaches a state it cannot handle."""


@dataclass
class ValueParams:
    """A header value such as ``text/plain; charset=utf-8`` split into parts."""

    value: str = ""
    type: str = ""
    subtype: str = ""
    params: dict[str, str] = field(default_factory=dict)
    has_params: bool = False


@dataclass
class Address:
    """A single e-mail address with an optional display name."""

    name: str = ""
    address: str = ""


@dataclass
class MIMENode:
    """One part of a MIME message."""

    root_node: bool = False
    child_nodes: list[MIMENode] = field(default_factory=list)
    header: list[str] = field(default_factory=list)
    parsed_header: dict[str, Any] = field(default_factory=dict)
    body: bytes = b""
    multipart: str = ""
    boundary: str = ""
    parent_boundary: str = ""
    line_count: int = 0
    size: int = 0
    message: MIMENode | None = None

    _state: str = field(default="header", init=False, repr=False, compare=False)
    _parent: MIMENode | None = field(
        default=None, init=False, repr=False, compare=False
    )


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _decode(data: bytes | bytearray | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", "surrogateescape")
    return data


def _valid_key(key: str) -> bool:
    return bool(_KEY_RE.match(key)) and len(key) < _MAX_KEY_LENGTH


def _split_lines(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(line, line_break)`` pairs; a trailing break yields one empty line."""
    if not text:
        return
    pos = 0
    while pos < len(text):
        newline = text.find("\n", pos)
        if newline < 0:
            yield text[pos:], ""
            return
        end = newline - 1 if newline > pos and text[newline - 1] == "\r" else newline
        yield text[pos:end], text[end : newline + 1]
        pos = newline + 1
    yield "", ""


def parse_value_params(header_value: str) -> ValueParams:
    """Split a structured header value into its value, type and parameters."""
    data = ValueParams()
    first, *rest = header_value.split(";")
    data.value = first.strip()
    type_parts = data.value.split("/")
    if len(type_parts) >= 2:
        data.type = type_parts[0].lower()
        data.subtype = "/".join(type_parts[1:])
    else:
        data.type = data.value.lower()

    for part in rest:
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        key = key.strip().lower()
        if _valid_key(key):
            data.params[key] = value.strip().strip("\"'")
            data.has_params = True
    return data


def parse_addresses(value: str) -> list[Address]:
    """Parse an address list; malformed input yields an empty list."""
    try:
        header = _HEADER_FACTORY("to", value)
    except (email_errors.HeaderParseError, IndexError, ValueError):
        return []
    if header.defects:
        return []
    return [
        Address(name=addr.display_name, address=addr.addr_spec)
        for addr in header.addresses
    ]


class MIMEParser:
    """Line-oriented parser building a MIME tree from an RFC 822 message."""

    def __init__(self, rfc822: bytes | str) -> None:
        self._lines = _split_lines(_decode(rfc822))
        self._tree = MIMENode(root_node=True)
        self._tree._state = ""
        self._node = self._create_node(self._tree)

    def parse(self) -> None:
        """Consume the message line by line, building the node tree."""
        prev_br = ""
        for line, br in self._lines:
            node = self._node
            if node._state == "header":
                if line == "":
                    self._process_node_header(node)
                    self._process_content_type(node)
                    node._state = "body"
                else:
                    node.header.append(line)
            elif node._state == "body":
                self._process_body_line(node, line, prev_br)
            else:
                raise MIMEParseError(f"unexpected state: {node._state!r}")
            prev_br = br

    def finalize_tree(self) -> None:
        """Normalise line endings and compute line counts and sizes."""
        self._finalize_node(self._tree)

    def result(self) -> MIMENode | None:
        """Return the top-level node of the parsed message."""
        return self._tree.child_nodes[0] if self._tree.child_nodes else None

    @staticmethod
    def _create_node(parent: MIMENode) -> MIMENode:
        node = MIMENode(parent_boundary=parent.boundary)
        node._parent = parent
        parent.child_nodes.append(node)
        return node

    def _process_body_line(self, node: MIMENode, line: str, prev_br: str) -> None:
        parent_boundary = node.parent_boundary
        delimiter = f"--{parent_boundary}"
        if parent_boundary and line in (delimiter, delimiter + "--"):
            content_type = node.parsed_header.get("content-type")
            if (
                isinstance(content_type, ValueParams)
                and content_type.value == "message/rfc822"
                and node.body
            ):
                sub_parser = MIMEParser(node.body)
                sub_parser.parse()
                node.message = sub_parser.result()

            parent = node._parent
            if line == delimiter:
                self._node = self._create_node(parent)
            else:
                self._node = parent
        elif node.boundary and line == f"--{node.boundary}":
            self._node = self._create_node(node)
        else:
            chunk = prev_br + line if node.body else line
            node.body += _encode(chunk)

    @staticmethod
    def _process_node_header(node: MIMENode) -> None:
        unfolded: list[str] = []
        for line in node.header:
            if unfolded and _LEADING_WS_RE.match(line):
                unfolded[-1] += "\r\n" + line
            else:
                unfolded.append(line)
        node.header = unfolded

        collected: dict[str, list[str]] = {}
        for line in unfolded:
            name, sep, raw_value = line.partition(":")
            if not sep:
                continue
            key = name.strip().lower()
            if _valid_key(key):
                value = _FOLD_RE.sub(" ", raw_value.strip())
                collected.setdefault(key, []).append(value)

        parsed: dict[str, Any] = {
            key: values[0] if len(values) == 1 else values
            for key, values in collected.items()
        }
        parsed.setdefault("content-type", "text/plain")

        for key in _STRUCTURED_FIELDS:
            if key in parsed:
                value = parsed[key]
                parsed[key] = parse_value_params(
                    value[-1] if isinstance(value, list) else value
                )

        for key in _SINGLE_VALUE_FIELDS:
            if isinstance(parsed.get(key), list):
                parsed[key] = parsed[key][-1]

        for key in _ADDRESS_FIELDS:
            if key not in parsed:
                continue
            value = parsed[key]
            values = value if isinstance(value, list) else [value]
            addresses = [
                address
                for item in values
                if item
                for address in parse_addresses(item)
            ]
            if addresses:
                parsed[key] = addresses

        node.parsed_header = parsed

    @staticmethod
    def _process_content_type(node: MIMENode) -> None:
        content_type = node.parsed_header.get("content-type")
        if not isinstance(content_type, ValueParams):
            return
        if content_type.type == "multipart" and "boundary" in content_type.params:
            node.multipart = content_type.subtype
            node.boundary = content_type.params["boundary"]

    def _finalize_node(self, node: MIMENode) -> None:
        if node.body:
            node.line_count = node.body.count(b"\n") + 1
            node.body = _NEWLINE_RE.sub(b"\r\n", node.body)
            node.size = len(node.body)
        for child in node.child_nodes:
            self._finalize_node(child)


def parse_mime(rfc822: bytes | str) -> MIMENode | None:
    """Parse an RFC 822 message and return the root of its MIME tree."""
    parser = MIMEParser(rfc822)
    parser.parse()
    parser.finalize_tree()
    return parser.result()