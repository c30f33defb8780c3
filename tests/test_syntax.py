import pytest

from mailguard.errors import InvalidDomain, InvalidEmail
from mailguard.syntax import validate_domain, validate_email


@pytest.mark.parametrize(
    "email,expected",
    [
        ("test@example.com", ("test", "example.com")),
        ("User.Name+tag@Sub.Example.COM", ("User.Name+tag", "sub.example.com")),
        ("o'brien@example.org", ("o'brien", "example.org")),
        ("x@localhost", ("x", "localhost")),
        ("a@123.456", ("a", "123.456")),
        ("a-b_c@my-domain.io", ("a-b_c", "my-domain.io")),
    ],
)
def test_valid_emails(email, expected):
    assert validate_email(email) == expected


@pytest.mark.parametrize(
    "email",
    [
        "",
        "invalid-email",
        "@example.com",
        "test@",
        "double@@domain.com",
        "a@b@c.com",
        "a..b@example.com",
        ".a@example.com",
        "a.@example.com",
        "a b@example.com",
        "a@exa mple.com",
        "a@-example.com",
        "a@example-.com",
        "a@example..com",
        "a@.example.com",
        "a@example.com.",
        "ü@example.com",
        "a@exämple.com",
        "a\n@example.com",
        "x" * 65 + "@example.com",
    ],
)
def test_invalid_emails(email):
    with pytest.raises(InvalidEmail) as exc_info:
        validate_email(email)
    assert exc_info.value.input == email


def test_email_without_exactly_one_at_reports_reason():
    with pytest.raises(InvalidEmail) as exc_info:
        validate_email("no-at-sign.example.com")
    assert exc_info.value.reason == "must contain exactly one @"


def test_non_string_email_is_invalid():
    with pytest.raises(InvalidEmail):
        validate_email(None)


@pytest.mark.parametrize(
    "domain,expected",
    [
        ("example.com", "example.com"),
        ("EXAMPLE.Com", "example.com"),
        ("sub.domain.example.co.uk", "sub.domain.example.co.uk"),
        ("xn--bcher-kva.example", "xn--bcher-kva.example"),
        ("a" * 63 + ".com", "a" * 63 + ".com"),
        ("localhost", "localhost"),
    ],
)
def test_valid_domains(domain, expected):
    assert validate_domain(domain) == expected


@pytest.mark.parametrize(
    "domain",
    [
        "",
        ".example.com",
        "example.com.",
        "example..com",
        "-example.com",
        "example-.com",
        "exa_mple.com",
        "a" * 64 + ".com",
        "exa mple.com",
        "example.com\n",
    ],
)
def test_invalid_domains(domain):
    with pytest.raises(InvalidDomain) as exc_info:
        validate_domain(domain)
    assert exc_info.value.input == domain


def test_domain_length_limit():
    label = "a" * 63
    # 4 * 63 + 3 dots = 255 characters
    too_long = ".".join([label] * 4)
    with pytest.raises(InvalidDomain) as exc_info:
        validate_domain(too_long)
    assert "253" in exc_info.value.reason

    # 3 * 63 + 61 + 3 dots = 253 characters
    at_limit = ".".join([label] * 3 + ["b" * 61])
    assert len(at_limit) == 253
    assert validate_domain(at_limit) == at_limit
