import pytest

from idcframe.textutil import (
    CmdStr,
    delete_lchr,
    delete_lrchr,
    delete_rchr,
    get_xml,
    get_xml_bool,
    get_xml_float,
    get_xml_int,
    get_xml_uint,
    match_str,
    pick_number,
    replace_str,
    to_lower,
    to_upper,
)

MESSI = "messi,10,striker,30,1.72,68.5,Barcelona"
XML = (
    "<filename>/tmp/_public.h</filename>"
    "<mtime>2020-01-01 12:20:35</mtime><size>18348</size>"
)


def test_delete_lchr_removes_only_leading():
    assert delete_lchr("  abc  ") == "abc  "
    assert delete_lchr("xxabcx", "x") == "abcx"
    assert delete_lchr("    ") == ""


def test_delete_rchr_removes_only_trailing():
    assert delete_rchr("  abc  ") == "  abc"
    assert delete_rchr("xabcxx", "x") == "xabc"
    assert delete_rchr("xxx", "x") == ""


def test_delete_lrchr_removes_both_ends():
    assert delete_lrchr("  a b  ") == "a b"
    assert delete_lrchr("--a-b--", "-") == "a-b"


def test_delete_rejects_multichar():
    with pytest.raises(ValueError):
        delete_lchr("abc", "ab")


def test_case_mapping_ascii_only():
    assert to_upper("abc-Xyz_1") == "ABC-XYZ_1"
    assert to_lower("ABC-xYZ_1") == "abc-xyz_1"
    assert to_upper("é") == "é"
    assert to_lower(to_upper(MESSI)) == MESSI.lower()


def test_replace_str_single_pass():
    assert replace_str("aaa", "a", "aa") == "aaaaaa"
    assert replace_str("hello world", "o", "") == "hell wrld"


def test_replace_str_loop():
    assert replace_str("a    b", "  ", " ", loop=True) == "a b"


def test_replace_str_loop_refuses_growth():
    with pytest.raises(ValueError):
        replace_str("aaa", "a", "ba", loop=True)


def test_replace_str_empty_old():
    with pytest.raises(ValueError):
        replace_str("abc", "", "x")


def test_replace_str_empty_source_unchanged():
    assert replace_str("", "a", "b") == ""


def test_pick_number_options():
    src = "a1b2-3.4+"
    assert pick_number(src) == "1234"
    assert set(pick_number(src, signed=True)) <= set("0123456789+-")
    assert "." in pick_number(src, signed=True, dot=True)
    assert pick_number("18348") == "18348"


def test_match_str_patterns():
    assert match_str("_public.cpp", "*.h,*.cpp")
    assert match_str("_public.h", "*.h,*.cpp")
    assert not match_str("_public.hpp", "*.h")
    assert match_str("SURF_ZH.XML", "*.xml")
    assert match_str("surf_zh_20210629.csv", "SURF_*.csv")


def test_match_str_special_rules():
    assert match_str("anything", "*")
    assert not match_str("anything", "")
    assert not match_str("anything", ",,")
    assert not match_str("ab", "abc")


def test_cmdstr_split_and_access():
    cmd = CmdStr(MESSI, ",")
    assert len(cmd) == 7
    assert cmd[0] == "messi"
    assert list(cmd) == MESSI.split(",")
    assert cmd.get_str(6) == "Barcelona"
    assert cmd.get_str(6, 3) == "Bar"
    assert cmd.get_int(1) == 10
    assert cmd.get_uint(3) == 30
    assert cmd.get_float(4) == pytest.approx(1.72)
    assert cmd.get_float(5) == pytest.approx(68.5)


def test_cmdstr_multichar_separator_and_strip():
    cmd = CmdStr(" a ~!~ b ~!~c", "~!~", strip=True)
    assert list(cmd) == ["a", "b", "c"]
    cmd.split("x|y", "|")
    assert list(cmd) == ["x", "y"]


def test_cmdstr_empty_input_has_one_field():
    assert len(CmdStr()) == 0
    assert list(CmdStr("", ",")) == [""]


def test_cmdstr_errors():
    cmd = CmdStr(MESSI, ",")
    with pytest.raises(IndexError):
        cmd.get_str(7)
    with pytest.raises(ValueError):
        cmd.get_int(0)
    with pytest.raises(ValueError):
        CmdStr("a", "")


def test_cmdstr_bool_and_signs():
    cmd = CmdStr("True,false,-15,-15", ",")
    assert cmd.get_bool(0) is True
    assert cmd.get_bool(1) is False
    assert cmd.get_int(2) == -15
    assert cmd.get_uint(3) == 15


def test_cmdstr_str_lists_fields():
    text = str(CmdStr("a,b", ","))
    assert text.splitlines() == ["[0]=a", "[1]=b"]


def test_get_xml_values():
    assert get_xml(XML, "filename") == "/tmp/_public.h"
    assert get_xml(XML, "mtime") == "2020-01-01 12:20:35"
    assert get_xml(XML, "filename", 4) == "/tmp"
    assert get_xml_int(XML, "size") == 18348
    assert get_xml_uint(XML, "size") == 18348


def test_get_xml_missing_tag():
    with pytest.raises(KeyError):
        get_xml(XML, "owner")
    with pytest.raises(KeyError):
        get_xml_int(XML, "owner")


def test_get_xml_typed():
    xml = "<t>-12.5</t><ok>TRUE</ok><bad>no</bad>"
    assert get_xml_float(xml, "t") == pytest.approx(-12.5)
    assert get_xml_int(xml, "t") == -125
    assert get_xml_bool(xml, "ok") is True
    assert get_xml_bool(xml, "bad") is False
    with pytest.raises(ValueError):
        get_xml_int(xml, "bad")