"""Build IMAP BODYSTRUCTURE data from a parsed MIME tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mimeindex.parser import Address, MIMENode, ValueParams

__all__ = [
    "BodyStructure",
    "BodyStructureOptions",
    "create_body_structure",
    "create_envelope",
    "flatten",
    "format_addresses",
    "get_content_type",
    "serialize_body_structure",
]


@dataclass(frozen=True)
class BodyStructureOptions:
    """Switches that change how the body structure is generated."""

    content_language_string: bool = False
    upper_case_keys: bool = False
    skip_content_location: bool = False
    body: bool = False
    attachment_rfc822: bool = False


def get_content_type(node: MIMENode) -> ValueParams:
    """Return the node's parsed Content-Type, or text/plain when it has none."""
    content_type = node.parsed_header.get("content-type")
    if isinstance(content_type, ValueParams):
        return content_type
    return ValueParams(value="text/plain", type="text", subtype="plain")


def format_addresses(addrs: Any) -> list[list[Any]] | None:
    """Convert a list of addresses to IMAP address structures."""
    if not isinstance(addrs, list) or not addrs:
        return None
    if not all(isinstance(addr, Address) for addr in addrs):
        return None
    result = []
    for addr in addrs:
        parts = addr.address.split("@")
        if len(parts) == 2:
            mailbox, host = parts
        else:
            mailbox, host = addr.address, ""
        result.append([addr.name, None, mailbox, host])
    return result


def create_envelope(node: MIMENode | None) -> list[Any]:
    """Build the ten-field IMAP envelope from a node's parsed headers."""
    if node is None:
        return [None] * 10
    header = node.parsed_header
    return [
        header.get("date"),
        header.get("subject"),
        format_addresses(header.get("from")),
        format_addresses(header.get("sender")),
        format_addresses(header.get("reply-to")),
        format_addresses(header.get("to")),
        format_addresses(header.get("cc")),
        format_addresses(header.get("bcc")),
        header.get("in-reply-to"),
        header.get("message-id"),
    ]


def flatten(value: Any) -> list[Any]:
    """Collapse nested lists into a single flat list."""
    if not isinstance(value, list):
        return [value]
    result: list[Any] = []
    for item in value:
        if isinstance(item, list):
            result.extend(flatten(item))
        else:
            result.append(item)
    return result


class BodyStructure:
    """The BODYSTRUCTURE of one MIME tree, built on construction."""

    def __init__(
        self,
        tree: MIMENode | None,
        options: BodyStructureOptions | None = None,
    ) -> None:
        self.tree = tree
        self.options = options or BodyStructureOptions()
        self._structure = self._build(tree)

    def create(self) -> list[Any]:
        """Return the generated body structure."""
        return self._structure

    def _upper(self, text: str) -> str:
        return text.upper() if self.options.upper_case_keys else text

    def _param_list(self, values: ValueParams) -> list[str] | None:
        if not (values.has_params and values.params):
            return None
        result: list[str] = []
        for key, value in values.params.items():
            result.extend((self._upper(key), value))
        return result

    def _build(self, node: MIMENode | None) -> list[Any]:
        if node is None:
            return []
        content_type = get_content_type(node)
        if content_type.type == "multipart":
            return self._multipart(node)
        if content_type.type == "text":
            return self._text(node)
        if (
            content_type.type == "message"
            and content_type.subtype == "rfc822"
            and not self.options.attachment_rfc822
        ):
            return self._rfc822(node)
        return self._attachment(node)

    def _basic_fields(self, node: MIMENode) -> list[Any]:
        content_type = get_content_type(node)
        body_type = content_type.type or "text"
        body_subtype = content_type.subtype or "plain"
        encoding = node.parsed_header.get("content-transfer-encoding")
        if not isinstance(encoding, str):
            encoding = "7bit"
        return [
            self._upper(body_type),
            self._upper(body_subtype),
            self._param_list(content_type),
            node.parsed_header.get("content-id"),
            node.parsed_header.get("content-description"),
            self._upper(encoding),
            node.size,
        ]

    def _language(self, node: MIMENode) -> Any:
        language = node.parsed_header.get("content-language")
        if not isinstance(language, str):
            return None
        cleaned = language.replace(" ", ",").replace(",,", ",").strip(",")
        if not cleaned:
            return None
        languages = cleaned.split(",")
        if len(languages) == 1 and self.options.content_language_string:
            return languages[0]
        return languages

    def _extension_fields(self, node: MIMENode) -> list[Any]:
        disposition = None
        raw_disposition = node.parsed_header.get("content-disposition")
        if isinstance(raw_disposition, ValueParams):
            disposition = [
                self._upper(raw_disposition.value),
                self._param_list(raw_disposition),
            ]
        result = [
            node.parsed_header.get("content-md5"),
            disposition,
            self._language(node),
        ]
        if not self.options.skip_content_location:
            result.append(node.parsed_header.get("content-location"))
        return result

    def _multipart(self, node: MIMENode) -> list[Any]:
        if node.child_nodes:
            result = [self._build(child) for child in node.child_nodes]
        else:
            result = [[]]
        result.append(self._upper(node.multipart or "mixed"))
        result.append(self._param_list(get_content_type(node)))
        if not self.options.body:
            result.extend(self._extension_fields(node)[1:])
        return result

    def _text(self, node: MIMENode) -> list[Any]:
        result = self._basic_fields(node)
        result.append(node.line_count)
        if not self.options.body:
            result.extend(self._extension_fields(node))
        return result

    def _attachment(self, node: MIMENode) -> list[Any]:
        result = self._basic_fields(node)
        if not self.options.body:
            result.extend(self._extension_fields(node))
        return result

    def _rfc822(self, node: MIMENode) -> list[Any]:
        result = self._basic_fields(node)
        result.append(create_envelope(node.message))
        result.append(self._build(node.message) if node.message is not None else [])
        result.append(node.line_count)
        if not self.options.body:
            result.extend(self._extension_fields(node))
        return result


def create_body_structure(
    tree: MIMENode | None, options: BodyStructureOptions | None = None
) -> list[Any]:
    """Build the BODYSTRUCTURE data for a MIME tree."""
    return BodyStructure(tree, options).create()


def serialize_body_structure(structure: Any) -> str:
    """Render body structure data in IMAP parenthesised-list syntax."""
    if structure is None:
        return "NIL"
    if isinstance(structure, bool):
        return f'"{str(structure).lower()}"'
    if isinstance(structure, str):
        escaped = structure.replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(structure, int):
        return str(structure)
    if isinstance(structure, (list, tuple)):
        if not structure:
            return "NIL"
        return "(" + " ".join(serialize_body_structure(item) for item in structure) + ")"
    return f'"{structure}"'