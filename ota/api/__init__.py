"""API access: GraphQL transport, operations and asset uploads."""

from .client import GraphqlClient, GraphqlError, HttpGraphqlClient, MockGraphqlClient
from .model import AppInfo, BranchInfo, ChannelInfo, UpdateFragment
from .upload import AssetUploader, HttpAssetUploader, MockAssetUploader, UploadError

__all__ = [
    # client
    "GraphqlClient",
    "GraphqlError",
    "HttpGraphqlClient",
    "MockGraphqlClient",
    # model
    "AppInfo",
    "BranchInfo",
    "ChannelInfo",
    "UpdateFragment",
    # upload
    "AssetUploader",
    "HttpAssetUploader",
    "MockAssetUploader",
    "UploadError",
]
