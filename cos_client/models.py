"""Data models for cos-client.

All models use Pydantic v2. XML documents map element names through field
aliases; options values map to the wire through explicit query_fields() /
header_fields() lists (see cos_client.options).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    field_serializer,
    field_validator,
)

from cos_client.options import OptionField, Options, header_fields_from_mapping
from cos_client.xml_body import dict_to_xml, xml_to_dict


# =============================================================================
# Protocol constants
# =============================================================================


class StorageClass(str, Enum):
    """Object storage level (x-cos-storage-class)."""

    STANDARD = "STANDARD"
    STANDARD_IA = "STANDARD_IA"
    ARCHIVE = "ARCHIVE"


class ObjectType(str, Enum):
    """Whether an object accepts appends (x-cos-object-type)."""

    NORMAL = "normal"
    APPENDABLE = "appendable"


class ServerSideEncryption(str, Enum):
    AES256 = "AES256"


class Permission(str, Enum):
    """ACL grant permission."""

    READ = "READ"
    WRITE = "WRITE"
    FULL_CONTROL = "FULL_CONTROL"


class CannedACL(str, Enum):
    """Values accepted by x-cos-acl."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"


class Caller(str, Enum):
    """Logical operation identifiers handed to senders and parsers."""

    SERVICE_GET = "service.get"
    BUCKET_GET = "bucket.get"
    BUCKET_GET_ACL = "bucket.get_acl"
    BUCKET_PUT_ACL = "bucket.put_acl"
    BUCKET_GET_LOCATION = "bucket.get_location"
    BUCKET_GET_LIFECYCLE = "bucket.get_lifecycle"
    BUCKET_PUT_LIFECYCLE = "bucket.put_lifecycle"
    BUCKET_DELETE_LIFECYCLE = "bucket.delete_lifecycle"
    OBJECT_GET = "object.get"
    OBJECT_HEAD = "object.head"
    OBJECT_PUT = "object.put"
    OBJECT_DELETE = "object.delete"


# =============================================================================
# XML document base
# =============================================================================


class XmlModel(BaseModel):
    """Element content of an XML document; aliases are the element names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class XmlDocument(XmlModel):
    """A complete XML body with a fixed root element.

    to_xml() always names the root ``xml_root``, whatever the caller built.
    Tags in ``force_list`` always decode to lists.
    """

    xml_root: ClassVar[str]
    force_list: ClassVar[frozenset[str]] = frozenset()

    def to_xml(self) -> bytes:
        data = self.model_dump(by_alias=True, context={"xml": True})
        return dict_to_xml({self.xml_root: _prune(data)})

    @classmethod
    def from_xml(cls, data: bytes) -> Self:
        """Parse XML bytes.

        Raises:
            xml.etree.ElementTree.ParseError: malformed XML.
            ValueError: wrong root element, or content that fails validation.
        """
        parsed = xml_to_dict(data, cls.force_list)
        root_tag, value = next(iter(parsed.items()))
        if root_tag != cls.xml_root:
            raise ValueError(f"expected element <{cls.xml_root}> but got <{root_tag}>")
        if value is None:
            value = {}
        elif isinstance(value, str):
            value = {"#text": value}
        return cls.model_validate(value)


def _prune(value: Any) -> Any:
    """Drop None values and empty containers, recursively."""
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if v is not None and v != [] and v != {}}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


def _unwrap_list(value: Any, tag: str) -> Any:
    """``{"Grant": [...]}`` (wrapper element) → ``[...]``; lists pass through."""
    if value is None:
        return []
    if isinstance(value, dict):
        items = value.get(tag)
        if items is None:
            return []
        return items if isinstance(items, list) else [items]
    return value


def _wrap_list(data: list[Any], tag: str, info: SerializationInfo) -> Any:
    if info.context and info.context.get("xml"):
        return {tag: data} if data else None
    return data


# =============================================================================
# ACL
# =============================================================================


class Owner(XmlModel):
    uin: str | None = Field(default=None, alias="uin")
    id: str | None = Field(default=None, alias="ID")
    display_name: str | None = Field(default=None, alias="DisplayName")


class ACLGrantee(XmlModel):
    type: str | None = Field(default=None, alias="@type", description="RootAccount, SubAccount, ...")
    uin: str | None = Field(default=None, alias="uin")
    id: str | None = Field(default=None, alias="ID")
    display_name: str | None = Field(default=None, alias="DisplayName")
    subaccount: str | None = Field(default=None, alias="Subaccount")


class ACLGrant(XmlModel):
    grantee: ACLGrantee | None = Field(default=None, alias="Grantee")
    permission: str | None = Field(default=None, alias="Permission")


class AccessControlPolicy(XmlDocument):
    """Bucket/object ACL document (GET and PUT ``?acl``)."""

    xml_root: ClassVar[str] = "AccessControlPolicy"
    force_list: ClassVar[frozenset[str]] = frozenset({"Grant"})

    owner: Owner | None = Field(default=None, alias="Owner")
    access_control_list: list[ACLGrant] = Field(
        default_factory=list, alias="AccessControlList"
    )

    @field_validator("access_control_list", mode="before")
    @classmethod
    def unwrap_grants(cls, v: Any) -> Any:
        return _unwrap_list(v, "Grant")

    @field_serializer("access_control_list", mode="wrap")
    def wrap_grants(self, v: Any, handler: Any, info: SerializationInfo) -> Any:
        return _wrap_list(handler(v), "Grant", info)


BucketGetACLResult = AccessControlPolicy


class ACLHeaderOptions(Options):
    """Header-based ACL. Alternative to an AccessControlPolicy body."""

    x_cos_acl: str | None = None
    x_cos_grant_read: str | None = Field(default=None, description='id="[OwnerUin]"')
    x_cos_grant_write: str | None = None
    x_cos_grant_full_control: str | None = None

    def header_fields(self) -> list[OptionField]:
        return [
            OptionField("x-cos-acl", self.x_cos_acl),
            OptionField("x-cos-grant-read", self.x_cos_grant_read),
            OptionField("x-cos-grant-write", self.x_cos_grant_write),
            OptionField("x-cos-grant-full-control", self.x_cos_grant_full_control),
        ]


class BucketPutACLOptions(BaseModel):
    """PUT ``?acl`` input: header ACL, body ACL, or (not recommended) both."""

    model_config = ConfigDict(extra="forbid")

    header: ACLHeaderOptions | None = None
    body: AccessControlPolicy | None = None


# =============================================================================
# Location
# =============================================================================


class BucketLocation(XmlDocument):
    """``<LocationConstraint>ap-beijing</LocationConstraint>``"""

    xml_root: ClassVar[str] = "LocationConstraint"

    location: str | None = Field(default=None, alias="#text")


# =============================================================================
# Lifecycle
# =============================================================================


class LifecycleTransition(XmlModel):
    days: int | None = Field(default=None, alias="Days")
    date: str | None = Field(default=None, alias="Date")
    storage_class: str | None = Field(default=None, alias="StorageClass")


class LifecycleExpiration(XmlModel):
    days: int | None = Field(default=None, alias="Days")
    date: str | None = Field(default=None, alias="Date")


class LifecycleRule(XmlModel):
    id: str | None = Field(default=None, alias="ID")
    prefix: str | None = Field(default=None, alias="Prefix")
    status: str | None = Field(default=None, alias="Status", description="Enabled or Disabled")
    transition: LifecycleTransition | None = Field(default=None, alias="Transition")
    expiration: LifecycleExpiration | None = Field(default=None, alias="Expiration")


class LifecycleConfiguration(XmlDocument):
    xml_root: ClassVar[str] = "LifecycleConfiguration"
    force_list: ClassVar[frozenset[str]] = frozenset({"Rule"})

    rules: list[LifecycleRule] = Field(default_factory=list, alias="Rule")


# =============================================================================
# Service (bucket listing)
# =============================================================================


class ServiceBucket(XmlModel):
    name: str | None = Field(default=None, alias="Name")
    location: str | None = Field(default=None, alias="Location")
    create_date: str | None = Field(default=None, alias="CreateDate")


class ServiceResult(XmlDocument):
    xml_root: ClassVar[str] = "ListAllMyBucketsResult"
    force_list: ClassVar[frozenset[str]] = frozenset({"Bucket"})

    owner: Owner | None = Field(default=None, alias="Owner")
    buckets: list[ServiceBucket] = Field(default_factory=list, alias="Buckets")

    @field_validator("buckets", mode="before")
    @classmethod
    def unwrap_buckets(cls, v: Any) -> Any:
        return _unwrap_list(v, "Bucket")

    @field_serializer("buckets", mode="wrap")
    def wrap_buckets(self, v: Any, handler: Any, info: SerializationInfo) -> Any:
        return _wrap_list(handler(v), "Bucket", info)


# =============================================================================
# Bucket (object listing)
# =============================================================================


class ObjectSummary(XmlModel):
    key: str | None = Field(default=None, alias="Key")
    last_modified: str | None = Field(default=None, alias="LastModified")
    etag: str | None = Field(default=None, alias="ETag")
    size: int | None = Field(default=None, alias="Size")
    owner: Owner | None = Field(default=None, alias="Owner")
    storage_class: str | None = Field(default=None, alias="StorageClass")


class CommonPrefix(XmlModel):
    prefix: str | None = Field(default=None, alias="Prefix")


class ListBucketResult(XmlDocument):
    xml_root: ClassVar[str] = "ListBucketResult"
    force_list: ClassVar[frozenset[str]] = frozenset({"Contents", "CommonPrefixes"})

    name: str | None = Field(default=None, alias="Name")
    prefix: str | None = Field(default=None, alias="Prefix")
    marker: str | None = Field(default=None, alias="Marker")
    next_marker: str | None = Field(default=None, alias="NextMarker")
    delimiter: str | None = Field(default=None, alias="Delimiter")
    max_keys: int | None = Field(default=None, alias="MaxKeys")
    is_truncated: bool = Field(default=False, alias="IsTruncated")
    encoding_type: str | None = Field(default=None, alias="EncodingType")
    contents: list[ObjectSummary] = Field(default_factory=list, alias="Contents")
    common_prefixes: list[CommonPrefix] = Field(default_factory=list, alias="CommonPrefixes")


class BucketGetOptions(Options):
    """Query options for listing objects in a bucket (GET Bucket)."""

    prefix: str | None = None
    delimiter: str | None = None
    encoding_type: str | None = None
    marker: str | None = None
    max_keys: int | None = None

    def query_fields(self) -> list[OptionField]:
        return [
            OptionField("prefix", self.prefix),
            OptionField("delimiter", self.delimiter),
            OptionField("encoding-type", self.encoding_type),
            OptionField("marker", self.marker),
            OptionField("max-keys", self.max_keys),
        ]


# =============================================================================
# Object
# =============================================================================


META_HEADER_PREFIX = "x-cos-meta-"


class ObjectPutHeaderOptions(Options):
    """Headers for PUT Object. ``content_length`` is needed for streams of unknown size."""

    cache_control: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    content_type: str | None = None
    content_length: int | None = None
    expires: str | None = None
    meta: dict[str, str] = Field(
        default_factory=dict, description="User metadata, sent as x-cos-meta-* headers"
    )
    storage_class: str | None = None
    server_side_encryption: str | None = None
    acl: ACLHeaderOptions | None = None

    def header_fields(self) -> list[OptionField]:
        fields = [
            OptionField("Cache-Control", self.cache_control),
            OptionField("Content-Disposition", self.content_disposition),
            OptionField("Content-Encoding", self.content_encoding),
            OptionField("Content-Type", self.content_type),
            OptionField("Content-Length", self.content_length),
            OptionField("Expires", self.expires),
            OptionField("x-cos-storage-class", self.storage_class),
            OptionField("x-cos-server-side-encryption", self.server_side_encryption),
        ]
        fields.extend(header_fields_from_mapping(self.meta, META_HEADER_PREFIX))
        if self.acl is not None:
            fields.extend(self.acl.header_fields())
        return fields


class ObjectGetOptions(Options):
    """GET Object: response-* overrides go to the query, conditions to headers."""

    response_content_type: str | None = None
    response_content_language: str | None = None
    response_expires: str | None = None
    response_cache_control: str | None = None
    response_content_disposition: str | None = None
    response_content_encoding: str | None = None
    range: str | None = None
    if_modified_since: str | None = None

    def query_fields(self) -> list[OptionField]:
        return [
            OptionField("response-content-type", self.response_content_type),
            OptionField("response-content-language", self.response_content_language),
            OptionField("response-expires", self.response_expires),
            OptionField("response-cache-control", self.response_cache_control),
            OptionField("response-content-disposition", self.response_content_disposition),
            OptionField("response-content-encoding", self.response_content_encoding),
        ]

    def header_fields(self) -> list[OptionField]:
        return [
            OptionField("Range", self.range),
            OptionField("If-Modified-Since", self.if_modified_since),
        ]


# =============================================================================
# Errors
# =============================================================================


class ErrorDocument(XmlDocument):
    """Body of a service error response."""

    xml_root: ClassVar[str] = "Error"

    code: str | None = Field(default=None, alias="Code")
    message: str | None = Field(default=None, alias="Message")
    resource: str | None = Field(default=None, alias="Resource")
    request_id: str | None = Field(default=None, alias="RequestId")
    trace_id: str | None = Field(default=None, alias="TraceId")
