"""Tests for cos_client.xml_body.

Tests cover:
- xml_to_dict on COS response shapes: listings, ACLs, text-only roots,
  namespaced documents, empty elements
- force_list for single-entry lists
- dict_to_xml: compact output, attributes, text, booleans, bad input
"""

import xml.etree.ElementTree as ET

import pytest

from cos_client.xml_body import dict_to_xml, xml_to_dict

LIST_BUCKET = b"""<ListBucketResult>
    <Name>test-1253846586</Name>
    <Prefix/>
    <Marker>  </Marker>
    <MaxKeys>1000</MaxKeys>
    <Contents><Key>a.txt</Key><Size>1</Size></Contents>
    <Contents><Key>b.txt</Key><Size>2</Size></Contents>
</ListBucketResult>"""

ACL_ONE_GRANT = (
    b"<AccessControlPolicy><AccessControlList>"
    b'<Grant><Grantee type="RootAccount"><uin>100000760461</uin></Grantee>'
    b"<Permission>FULL_CONTROL</Permission></Grant>"
    b"</AccessControlList></AccessControlPolicy>"
)


# =============================================================================
# Decoding
# =============================================================================


class TestDecodeListing:
    def test_listing(self) -> None:
        assert xml_to_dict(LIST_BUCKET) == {
            "ListBucketResult": {
                "Name": "test-1253846586",
                "Prefix": None,
                "Marker": None,
                "MaxKeys": "1000",
                "Contents": [{"Key": "a.txt", "Size": "1"}, {"Key": "b.txt", "Size": "2"}],
            }
        }

    def test_single_entry_is_not_a_list_by_default(self) -> None:
        xml = b"<ListBucketResult><Contents><Key>a.txt</Key></Contents></ListBucketResult>"
        assert xml_to_dict(xml)["ListBucketResult"]["Contents"] == {"Key": "a.txt"}

    def test_interleaved_siblings_grouped(self) -> None:
        xml = b"<Rules><Rule>1</Rule><Other>x</Other><Rule>2</Rule></Rules>"
        assert xml_to_dict(xml) == {"Rules": {"Rule": ["1", "2"], "Other": "x"}}


class TestDecodeForceList:
    def test_single_grant_forced(self) -> None:
        result = xml_to_dict(ACL_ONE_GRANT, force_list={"Grant"})
        grants = result["AccessControlPolicy"]["AccessControlList"]["Grant"]
        assert grants == [
            {"Grantee": {"@type": "RootAccount", "uin": "100000760461"}, "Permission": "FULL_CONTROL"}
        ]

    def test_many_entries_unchanged(self) -> None:
        result = xml_to_dict(LIST_BUCKET, force_list=frozenset({"Contents"}))
        assert len(result["ListBucketResult"]["Contents"]) == 2

    def test_other_tags_unaffected(self) -> None:
        result = xml_to_dict(LIST_BUCKET, force_list={"Contents"})
        assert result["ListBucketResult"]["Name"] == "test-1253846586"


class TestDecodeTextAndAttributes:
    def test_text_only_root(self) -> None:
        xml = b"<LocationConstraint>ap-beijing</LocationConstraint>"
        assert xml_to_dict(xml) == {"LocationConstraint": "ap-beijing"}

    def test_empty_root(self) -> None:
        assert xml_to_dict(b"<LocationConstraint/>") == {"LocationConstraint": None}

    def test_text_next_to_attribute(self) -> None:
        xml = b'<Grantee type="Group">http://cam.qcloud.com/groups/global/AllUsers</Grantee>'
        assert xml_to_dict(xml) == {
            "Grantee": {"@type": "Group", "#text": "http://cam.qcloud.com/groups/global/AllUsers"}
        }

    def test_xsi_type_attribute_ignored(self) -> None:
        xml = (
            b'<Grantee xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
            b' xsi:type="CanonicalUser"><ID>qcs::cam::uin/1:uin/1</ID></Grantee>'
        )
        assert xml_to_dict(xml) == {"Grantee": {"ID": "qcs::cam::uin/1:uin/1"}}


class TestDecodeNamespaces:
    def test_default_namespace(self) -> None:
        xml = (
            b'<LocationConstraint xmlns="http://www.qcloud.com/document/product/436/7751">'
            b"ap-guangzhou</LocationConstraint>"
        )
        assert xml_to_dict(xml) == {"LocationConstraint": "ap-guangzhou"}

    def test_prefixed_children(self) -> None:
        xml = b'<c:Error xmlns:c="urn:cos"><c:Code>NoSuchKey</c:Code></c:Error>'
        assert xml_to_dict(xml) == {"Error": {"Code": "NoSuchKey"}}


class TestDecodeErrors:
    @pytest.mark.parametrize("body", [b"", b"<Error><Code>x</Error>", b"not xml at all"])
    def test_malformed(self, body: bytes) -> None:
        with pytest.raises(ET.ParseError):
            xml_to_dict(body)


# =============================================================================
# Encoding
# =============================================================================


class TestEncode:
    def test_compact_bytes(self) -> None:
        data = {"LifecycleConfiguration": {"Rule": {"ID": "1", "Status": "Enabled"}}}
        assert dict_to_xml(data) == (
            b"<LifecycleConfiguration><Rule><ID>1</ID><Status>Enabled</Status></Rule>"
            b"</LifecycleConfiguration>"
        )

    def test_list_becomes_siblings(self) -> None:
        data = {"LifecycleConfiguration": {"Rule": [{"ID": "1"}, {"ID": "2"}]}}
        root = ET.fromstring(dict_to_xml(data))
        assert [rule.findtext("ID") for rule in root.findall("Rule")] == ["1", "2"]

    def test_none_is_empty_element(self) -> None:
        root = ET.fromstring(dict_to_xml({"ListBucketResult": {"Prefix": None}}))
        prefix = root.find("Prefix")
        assert prefix is not None
        assert prefix.text is None
        assert len(prefix) == 0

    def test_scalars(self) -> None:
        root = ET.fromstring(dict_to_xml({"Expiration": {"Days": 30, "Enabled": True, "Off": False}}))
        assert root.findtext("Days") == "30"
        assert root.findtext("Enabled") == "true"
        assert root.findtext("Off") == "false"

    def test_attribute(self) -> None:
        data = {"Grantee": {"@type": "RootAccount", "uin": "100000760461"}}
        assert dict_to_xml(data) == b'<Grantee type="RootAccount"><uin>100000760461</uin></Grantee>'

    def test_none_attribute_skipped(self) -> None:
        assert dict_to_xml({"Grantee": {"@type": None, "uin": "1"}}) == b"<Grantee><uin>1</uin></Grantee>"

    def test_text_key(self) -> None:
        assert dict_to_xml({"LocationConstraint": {"#text": "ap-beijing"}}) == (
            b"<LocationConstraint>ap-beijing</LocationConstraint>"
        )

    def test_special_characters_escaped(self) -> None:
        root = ET.fromstring(dict_to_xml({"Rule": {"Prefix": "a&b<c>"}}))
        assert root.findtext("Prefix") == "a&b<c>"

    def test_declaration_optional(self) -> None:
        assert dict_to_xml({"Error": None}, xml_declaration=True).startswith(b"<?xml")
        assert not dict_to_xml({"Error": None}).startswith(b"<?xml")

    @pytest.mark.parametrize("data", [{}, {"A": "1", "B": "2"}])
    def test_needs_single_root(self, data: dict) -> None:
        with pytest.raises(ValueError, match="exactly one top-level key"):
            dict_to_xml(data)


def test_decode_inverts_encode_with_force_list() -> None:
    data = {
        "AccessControlPolicy": {
            "Owner": {"uin": "1"},
            "AccessControlList": {
                "Grant": [{"Grantee": {"@type": "RootAccount", "uin": "1"}, "Permission": "READ"}]
            },
        }
    }
    assert xml_to_dict(dict_to_xml(data), force_list={"Grant"}) == data
