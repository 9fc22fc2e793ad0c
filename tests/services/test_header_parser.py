import pytest

from dts_critic.exceptions import HeaderParseError
from dts_critic.services.header_parser import parse_header, parse_header_or_fail
from tests.consts import DTS_CRITIC_DIR


def test_parse_header__on_full_header__returns_all_fields():
    header = parse_header_or_fail((DTS_CRITIC_DIR / "index.d.ts").read_text(encoding="utf-8"))

    assert header.library_name == "dts-critic"
    assert header.version == "1.0"
    assert not header.non_npm
    assert header.projects == ["https://github.com/sandersn/dts-critic"]
    assert header.typescript_version == "3.1"


def test_parse_header__on_non_npm_package__sets_flag():
    header = parse_header_or_fail("// Type definitions for non-npm package tslib 1.0\n")

    assert header.non_npm
    assert header.library_name == "tslib"


def test_parse_header__on_patch_version__keeps_major_minor():
    header = parse_header_or_fail("// Type definitions for left-pad 1.2.3\n")

    assert header.library_major_version == 1
    assert header.library_minor_version == 2


def test_parse_header__on_multiple_projects__splits_urls():
    header = parse_header_or_fail(
        "// Type definitions for thing 2.0\n"
        "// Project: https://a.example, https://b.example\n"
        "export declare const x: number;\n"
    )

    assert header.projects == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize(
    "text",
    ["", "export declare const x: number;\n", "// Type definitions for nothing\n"],
)
def test_parse_header_or_fail__on_bad_header__raises(text: str):
    with pytest.raises(HeaderParseError):
        parse_header_or_fail(text)


def test_parse_header__on_bad_header__returns_none():
    assert parse_header("export declare const x: number;\n") is None
