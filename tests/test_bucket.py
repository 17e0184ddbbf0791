"""Tests for bucket listing, location and lifecycle operations."""

import xml.etree.ElementTree as ET

from cos_client.body import content_md5
from cos_client.models import (
    BucketGetOptions,
    LifecycleConfiguration,
    LifecycleExpiration,
    LifecycleRule,
    ListBucketResult,
)
from tests.conftest import RecordingHandler, make_client, run

LIST_RESPONSE = (
    b"<ListBucketResult><Name>test-1253846586</Name><Prefix>logs/</Prefix><Marker/>"
    b"<MaxKeys>2</MaxKeys><Delimiter>/</Delimiter><IsTruncated>false</IsTruncated>"
    b"<Contents><Key>logs/a.log</Key><LastModified>2017-06-23T12:33:26.000Z</LastModified>"
    b'<ETag>"79f2a852fac7e826c9f4dbe037f8a63b"</ETag><Size>10</Size>'
    b"<Owner><ID>1253846586</ID></Owner><StorageClass>STANDARD</StorageClass></Contents>"
    b"<Contents><Key>logs/b.log</Key><Size>20</Size></Contents>"
    b"<CommonPrefixes><Prefix>logs/2017/</Prefix></CommonPrefixes>"
    b"</ListBucketResult>"
)

LIFECYCLE_RESPONSE = (
    b"<LifecycleConfiguration>"
    b"<Rule><ID>1234</ID><Prefix>test</Prefix><Status>Enabled</Status>"
    b"<Transition><Days>10</Days><StorageClass>STANDARD_IA</StorageClass></Transition></Rule>"
    b"<Rule><ID>123422</ID><Prefix>gg</Prefix><Status>Disabled</Status>"
    b"<Expiration><Days>10</Days></Expiration></Rule>"
    b"</LifecycleConfiguration>"
)


async def call(handler: RecordingHandler, method: str, *args: object):
    async with make_client(handler) as client:
        return await getattr(client.bucket, method)(*args)


class TestGetBucket:
    def test_query_and_result(self) -> None:
        handler = RecordingHandler(content=LIST_RESPONSE)
        opt = BucketGetOptions(prefix="logs/", delimiter="/", max_keys=2)
        result, resp = run(call(handler, "get", opt))

        params = handler.last.url.params
        assert handler.last.method == "GET"
        assert params["prefix"] == "logs/"
        assert params["delimiter"] == "/"
        assert params["max-keys"] == "2"
        assert "marker" not in params

        assert isinstance(result, ListBucketResult)
        assert [obj.key for obj in result.contents] == ["logs/a.log", "logs/b.log"]
        assert result.contents[0].owner.id == "1253846586"
        assert result.common_prefixes[0].prefix == "logs/2017/"
        assert result.is_truncated is False
        assert resp.result is result

    def test_without_options(self) -> None:
        handler = RecordingHandler(content=LIST_RESPONSE)
        run(call(handler, "get"))
        assert handler.last.url.query == b""

    def test_empty_body_gives_empty_result(self) -> None:
        result, resp = run(call(RecordingHandler(), "get"))
        assert result == ListBucketResult()
        assert resp.result is None


class TestLocation:
    def test_get_location(self) -> None:
        handler = RecordingHandler(content=b"<LocationConstraint>ap-beijing</LocationConstraint>")
        location, _ = run(call(handler, "get_location"))
        assert handler.last.url.query == b"location"
        assert location.location == "ap-beijing"


class TestLifecycle:
    def test_get(self) -> None:
        handler = RecordingHandler(content=LIFECYCLE_RESPONSE)
        config, _ = run(call(handler, "get_lifecycle"))

        assert handler.last.url.query == b"lifecycle"
        assert [rule.id for rule in config.rules] == ["1234", "123422"]
        assert config.rules[0].transition.storage_class == "STANDARD_IA"
        assert config.rules[1].expiration.days == 10

    def test_put(self) -> None:
        handler = RecordingHandler()
        config = LifecycleConfiguration(
            rules=[
                LifecycleRule(
                    id="expire-logs",
                    prefix="logs/",
                    status="Enabled",
                    expiration=LifecycleExpiration(days=30),
                )
            ]
        )
        run(call(handler, "put_lifecycle", config))

        request = handler.last
        assert request.method == "PUT"
        assert request.url.query == b"lifecycle"
        assert request.headers["Content-MD5"] == content_md5(request.content)
        root = ET.fromstring(request.content)
        assert root.tag == "LifecycleConfiguration"
        assert root.find("Rule/Expiration/Days").text == "30"
        assert LifecycleConfiguration.from_xml(request.content) == config

    def test_delete(self) -> None:
        handler = RecordingHandler(status_code=204)
        resp = run(call(handler, "delete_lifecycle"))
        assert handler.last.method == "DELETE"
        assert handler.last.url.query == b"lifecycle"
        assert resp.status_code == 204
