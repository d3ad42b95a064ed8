import pytest

from mimeindex.parser import (
    Address,
    MIMEParser,
    ValueParams,
    parse_addresses,
    parse_mime,
    parse_value_params,
)

BASIC_EMAIL = """From: sender@example.com
To: recipient@example.com
Subject: Basic Test Email
Date: Mon, 23 Nov 2024 10:30:00 +0000
Content-Type: text/plain; charset=utf-8

Hello World!
This is a basic test email."""

MULTIPART_EMAIL = """From: sender@example.com
To: recipient@example.com
Subject: Multipart Test Email
Content-Type: multipart/alternative; boundary="test-boundary"

--test-boundary
Content-Type: text/plain; charset=utf-8

This is the plain text version.

--test-boundary
Content-Type: text/html; charset=utf-8

<html><body><p>This is the HTML version.</p></body></html>

--test-boundary--"""

NESTED_EMAIL = """From: sender@example.com
To: recipient@example.com
Subject: Nested Multipart Test
Content-Type: multipart/mixed; boundary="outer-boundary"

--outer-boundary
Content-Type: multipart/alternative; boundary="inner-boundary"

--inner-boundary
Content-Type: text/plain

Plain text content

--inner-boundary
Content-Type: text/html

<html>HTML content</html>

--inner-boundary--

--outer-boundary
Content-Type: application/pdf; name="document.pdf"
Content-Disposition: attachment; filename="document.pdf"

PDF content here

--outer-boundary--"""

ATTACHMENT_EMAIL = """From: john.doe@example.com
To: client@example.com
Subject: Contract Documents
Content-Type: multipart/mixed; boundary="doc-boundary"

--doc-boundary
Content-Type: text/plain

Please find the contract documents attached.

--doc-boundary
Content-Type: application/pdf; name="contract.pdf"
Content-Disposition: attachment; filename="contract.pdf"
Content-Transfer-Encoding: base64

JVBERi0xLjMKJcTl8uXrp/Og0MTGCjQgMCBvYmoKPDwKL0xlbmd0aCA1MTEK

--doc-boundary
Content-Type: application/msword; name="terms.doc"
Content-Disposition: attachment; filename="terms.doc"

Document content...

--doc-boundary--"""


def test_basic_email_headers():
    tree = parse_mime(BASIC_EMAIL.encode())
    assert tree.parsed_header["subject"] == "Basic Test Email"
    assert tree.parsed_header["from"][0].address == "sender@example.com"
    assert tree.parsed_header["to"][0].address == "recipient@example.com"
    ct = tree.parsed_header["content-type"]
    assert (ct.type, ct.subtype) == ("text", "plain")


def test_basic_email_body():
    tree = parse_mime(BASIC_EMAIL.encode())
    assert tree.body == b"Hello World!\r\nThis is a basic test email."
    assert tree.line_count == 2
    assert tree.size == len(tree.body)


def test_accepts_str_input():
    tree = parse_mime(BASIC_EMAIL)
    assert tree.parsed_header["subject"] == "Basic Test Email"


def test_multipart_email():
    tree = parse_mime(MULTIPART_EMAIL.encode())
    assert tree.multipart == "alternative"
    assert tree.boundary == "test-boundary"
    assert len(tree.child_nodes) == 2

    first, second = tree.child_nodes
    ct1 = first.parsed_header["content-type"]
    assert (ct1.type, ct1.subtype) == ("text", "plain")
    assert first.body == b"This is the plain text version.\r\n"
    assert first.line_count == 2

    ct2 = second.parsed_header["content-type"]
    assert (ct2.type, ct2.subtype) == ("text", "html")
    assert b"HTML version" in second.body
    assert second.parent_boundary == "test-boundary"


def test_nested_multipart_email():
    tree = parse_mime(NESTED_EMAIL.encode())
    assert tree.multipart == "mixed"
    assert len(tree.child_nodes) == 2

    nested, attachment = tree.child_nodes
    assert nested.multipart == "alternative"
    assert len(nested.child_nodes) == 2

    ct = attachment.parsed_header["content-type"]
    assert (ct.type, ct.subtype) == ("application", "pdf")
    assert ct.params["name"] == "document.pdf"
    disposition = attachment.parsed_header["content-disposition"]
    assert disposition.value == "attachment"
    assert disposition.params["filename"] == "document.pdf"


def test_attachment_detection():
    tree = parse_mime(ATTACHMENT_EMAIL.encode())
    attachments = [
        child.parsed_header["content-type"]
        for child in tree.child_nodes
        if child.parsed_header["content-type"].type != "text"
    ]
    assert [(a.subtype, a.params.get("name")) for a in attachments] == [
        ("pdf", "contract.pdf"),
        ("msword", "terms.doc"),
    ]
    assert tree.child_nodes[1].parsed_header["content-transfer-encoding"] == "base64"


@pytest.mark.parametrize(
    "header, key, expected",
    [
        ("From: john@example.com", "from", [Address(address="john@example.com")]),
        (
            "From: John Doe <john@example.com>",
            "from",
            [Address(name="John Doe", address="john@example.com")],
        ),
        (
            "To: john@example.com, jane@example.com",
            "to",
            [
                Address(address="john@example.com"),
                Address(address="jane@example.com"),
            ],
        ),
    ],
)
def test_address_parsing(header, key, expected):
    tree = parse_mime((header + "\nSubject: Test\n\nBody").encode())
    assert tree.parsed_header[key] == expected


def test_empty_address_header_kept_as_string():
    tree = parse_mime(b"From: \nSubject: Test\n\nBody")
    assert tree.parsed_header["from"] == ""


def test_parse_addresses_malformed_returns_empty():
    assert parse_addresses("undisclosed") == []


def test_header_folding():
    email = """From: sender@example.com
To: recipient@example.com
Subject: This is a very long subject line
 that continues on the next line
 and even another line
Content-Type: text/html;
 charset=utf-8;
 boundary="test"

Body content"""
    tree = parse_mime(email.encode())
    assert tree.parsed_header["subject"] == (
        "This is a very long subject line that continues on the next line "
        "and even another line"
    )
    ct = tree.parsed_header["content-type"]
    assert (ct.type, ct.subtype) == ("text", "html")
    assert ct.params["charset"] == "utf-8"
    assert tree.multipart == ""


def test_content_type_parameters():
    email = """From: sender@example.com
To: recipient@example.com
Subject: Content-Type Parameters Test
Content-Type: text/plain; charset="utf-8"; format=flowed; delsp=yes

Body content"""
    ct = parse_mime(email.encode()).parsed_header["content-type"]
    assert (ct.type, ct.subtype) == ("text", "plain")
    assert ct.has_params is True
    assert ct.params == {"charset": "utf-8", "format": "flowed", "delsp": "yes"}


@pytest.mark.parametrize(
    "value, expected",
    [
        (
            "text/plain",
            ValueParams(value="text/plain", type="text", subtype="plain"),
        ),
        (
            "text/html; charset=utf-8",
            ValueParams(
                value="text/html",
                type="text",
                subtype="html",
                params={"charset": "utf-8"},
                has_params=True,
            ),
        ),
    ],
)
def test_parse_value_params(value, expected):
    assert parse_value_params(value) == expected


def test_parse_value_params_keeps_subtype_case_and_strips_quotes():
    result = parse_value_params("Text/HTML; NAME='x.html'; bogus")
    assert result.type == "text"
    assert result.subtype == "HTML"
    assert result.params == {"name": "x.html"}


def test_parse_value_params_without_subtype():
    result = parse_value_params("attachment")
    assert (result.value, result.type, result.subtype) == ("attachment", "attachment", "")
    assert result.has_params is False


def test_default_content_type():
    tree = parse_mime(b"Subject: Plain\n\nbody")
    ct = tree.parsed_header["content-type"]
    assert (ct.value, ct.type, ct.subtype) == ("text/plain", "text", "plain")


def test_duplicate_headers_kept_in_order():
    email = b"Received: first\nReceived: second\nContent-Id: <a>\nContent-Id: <b>\n\nbody"
    tree = parse_mime(email)
    assert tree.parsed_header["received"] == ["first", "second"]
    assert tree.parsed_header["content-id"] == "<b>"


def test_crlf_line_endings():
    tree = parse_mime(b"Subject: Crlf\r\n\r\nline one\r\nline two")
    assert tree.parsed_header["subject"] == "Crlf"
    assert tree.body == b"line one\r\nline two"
    assert tree.line_count == 2


def test_embedded_rfc822_message():
    email = """Content-Type: multipart/mixed; boundary="b"

--b
Content-Type: message/rfc822

Subject: Inner
From: inner@example.com

inner body
--b--"""
    tree = parse_mime(email.encode())
    part = tree.child_nodes[0]
    assert part.message.parsed_header["subject"] == "Inner"
    assert part.message.parsed_header["from"] == [Address(address="inner@example.com")]
    assert part.message.body == b"inner body"


def test_parser_steps_match_parse_mime():
    parser = MIMEParser(MULTIPART_EMAIL.encode())
    parser.parse()
    parser.finalize_tree()
    tree = parser.result()
    assert tree == parse_mime(MULTIPART_EMAIL.encode())
    assert tree.multipart == "alternative"


def test_repeated_parsing_is_stable():
    email = """From: sender@example.com
To: recipient1@example.com, recipient2@example.com
Subject: Performance Test Email
Content-Type: multipart/mixed; boundary="perf-boundary"

--perf-boundary
Content-Type: text/plain; charset=utf-8

This is a performance test email.

--perf-boundary
Content-Type: text/html; charset=utf-8

<html><body><h1>Performance Test</h1></body></html>

--perf-boundary--""".encode()
    trees = [parse_mime(email) for _ in range(100)]
    assert all(len(tree.child_nodes) == 2 for tree in trees)
    assert len(trees[0].parsed_header["to"]) == 2