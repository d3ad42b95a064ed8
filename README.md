# mimeindex

`mimeindex` reads a raw RFC 822 message and turns it into a tree of MIME
parts. From that tree it builds the nested data an IMAP server sends for
`BODYSTRUCTURE` and `BODY` fetches, and writes that data in IMAP list syntax.

It needs nothing beyond the standard library.

## Installation

```
pip install mimeindex
```

## Parsing a message

```python
from mimeindex.parser import parse_mime

raw = (
    b"From: John Doe <john@example.com>\n"
    b"To: jane@example.com\n"
    b"Subject: Status\n"
    b"Content-Type: multipart/alternative; boundary=\"b\"\n"
    b"\n"
    b"--b\n"
    b"Content-Type: text/plain; charset=utf-8\n"
    b"\n"
    b"Plain text\n"
    b"--b\n"
    b"Content-Type: text/html\n"
    b"\n"
    b"<p>HTML</p>\n"
    b"--b--"
)

tree = parse_mime(raw)
tree.parsed_header["subject"]    # "Status"
tree.parsed_header["from"][0]    # Address(name="John Doe", address="john@example.com")
tree.multipart                   # "alternative"
len(tree.child_nodes)            # 2
```

`parse_mime` accepts `bytes` or `str` and returns the top `MIMENode`, or
`None` for empty input.

In each node, `parsed_header` maps lower-case header names to values:

- `content-type` and `content-disposition` are `ValueParams` objects with
  `value`, `type`, `subtype`, `params` and `has_params`. A part without a
  Content-Type gets `text/plain`.
- `from`, `sender`, `reply-to`, `to`, `cc` and `bcc` are lists of `Address`
  when at least one address could be parsed.
- Other headers are strings, or lists of strings when a header occurs more
  than once. Folded header lines are joined with single spaces.

`body` holds the part's content with CRLF line endings, and `size` and
`line_count` describe it. Multipart nodes carry `multipart` (the subtype),
`boundary` and their `child_nodes`. A `message/rfc822` part inside a
multipart message holds the parsed embedded message in `message`.

`MIMEParser` gives control over each step: construct it with the message,
call `parse()`, then `finalize_tree()`, then `result()`. A parser that
reaches a state it cannot handle raises `MIMEParseError`.

`parse_value_params` and `parse_addresses` work on single header values.

## Building BODYSTRUCTURE

```python
from mimeindex.bodystructure import (
    BodyStructureOptions,
    create_body_structure,
    serialize_body_structure,
)

structure = create_body_structure(tree, BodyStructureOptions(upper_case_keys=True))
print(serialize_body_structure(structure))
```

`BodyStructureOptions` fields, all off by default:

| option                    | effect                                                          |
|---------------------------|-----------------------------------------------------------------|
| `content_language_string` | a single Content-Language is given as a string, not a list      |
| `upper_case_keys`         | types, subtypes, encodings, dispositions and parameter names in upper case |
| `skip_content_location`   | Content-Location is left out of the extension fields            |
| `body`                    | extension fields are left out, as for `BODY`                    |
| `attachment_rfc822`       | `message/rfc822` parts are described as plain attachments       |

The structure is built from nested lists, strings, integers and `None`.
`serialize_body_structure` writes `None` and empty lists as `NIL`, integers
as digits, strings in double quotes, and lists in parentheses.

`mimeindex.bodystructure` also provides `BodyStructure` (build once, read
with `create()`), `get_content_type`, `format_addresses`, `create_envelope`
(the ten-field IMAP envelope of a node) and `flatten`.

## What it does not do

`mimeindex` is a library only. It has no command-line tool, runs no IMAP
server, stores no messages and decodes no transfer encodings; it describes
messages handed to it.