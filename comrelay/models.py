"""Community configuration, profile and sponsor records."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional


def _json(name: str, omitempty: bool = False, nested: Any = None, many: bool = False):
    return {"json": name, "omitempty": omitempty, "nested": nested, "many": many}


def _to_dict(obj: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for item in dataclasses.fields(obj):
        meta = item.metadata
        value = getattr(obj, item.name)
        if meta.get("omitempty") and not value:
            continue
        if meta.get("nested") is not None and value is not None:
            value = [_to_dict(v) for v in value] if meta.get("many") else _to_dict(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        out[meta.get("json", item.name)] = value
    return out


def _from_dict(cls: Any, data: Mapping[str, Any]) -> Any:
    values: dict[str, Any] = {}
    for item in dataclasses.fields(cls):
        meta = item.metadata
        key = meta.get("json", item.name)
        if key not in data:
            continue
        value = data[key]
        nested = meta.get("nested")
        if nested is not None and value is not None:
            value = [_from_dict(nested, v) for v in value] if meta.get("many") else _from_dict(nested, value)
        values[item.name] = value
    return cls(**values)


class _JsonModel:
    def to_dict(self) -> dict[str, Any]:
        """Return the JSON wire form."""
        return _to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        """Build from the JSON wire form; missing keys keep their defaults."""
        return _from_dict(cls, data)


@dataclass
class Theme(_JsonModel):
    primary_color: str = field(default="", metadata=_json("primaryColor"))


@dataclass
class Community(_JsonModel):
    name: str = field(default="", metadata=_json("name"))
    description: str = field(default="", metadata=_json("description"))
    url: str = field(default="", metadata=_json("url"))
    alias: str = field(default="", metadata=_json("alias"))
    logo: str = field(default="", metadata=_json("logo"))
    hidden: bool = field(default=False, metadata=_json("hidden", omitempty=True))
    custom_domain: str = field(default="", metadata=_json("custom_domain", omitempty=True))
    theme: Optional[Theme] = field(default=None, metadata=_json("theme", True, Theme))


@dataclass
class CommunityScan(_JsonModel):
    url: str = field(default="", metadata=_json("url"))
    name: str = field(default="", metadata=_json("name"))


@dataclass
class CommunityIndexer(_JsonModel):
    url: str = field(default="", metadata=_json("url"))
    ipfs_url: str = field(default="", metadata=_json("ipfs_url"))
    # The wire name is the field name itself.
    key: str = field(default_factory=str)


@dataclass
class CommunityIPFS(_JsonModel):
    url: str = field(default="", metadata=_json("url"))


@dataclass
class CommunityNode(_JsonModel):
    chain_id: int = field(default=0, metadata=_json("chain_id"))
    url: str = field(default="", metadata=_json("url"))
    ws_url: str = field(default="", metadata=_json("ws_url"))


@dataclass
class CommunityERC4337(_JsonModel):
    rpc_url: str = field(default="", metadata=_json("rpc_url"))
    paymaster_address: str = field(default="", metadata=_json("paymaster_address"))
    entrypoint_address: str = field(default="", metadata=_json("entrypoint_address"))
    account_factory_address: str = field(default="", metadata=_json("account_factory_address"))
    paymaster_rpc_url: str = field(default="", metadata=_json("paymaster_rpc_url"))
    paymaster_type: str = field(default="", metadata=_json("paymaster_type"))


@dataclass
class CommunityToken(_JsonModel):
    standard: str = field(default="", metadata=_json("standard"))
    address: str = field(default="", metadata=_json("address"))
    name: str = field(default="", metadata=_json("name"))
    symbol: str = field(default="", metadata=_json("symbol"))
    decimals: int = field(default=0, metadata=_json("decimals"))


@dataclass
class CommunityProfile(_JsonModel):
    address: str = field(default="", metadata=_json("address"))


@dataclass
class CommunityPlugin(_JsonModel):
    name: str = field(default="", metadata=_json("name"))
    icon: str = field(default="", metadata=_json("icon"))
    url: str = field(default="", metadata=_json("url"))


@dataclass
class CommunityConfig(_JsonModel):
    community: Community = field(default_factory=Community, metadata=_json("community", nested=Community))
    scan: CommunityScan = field(default_factory=CommunityScan, metadata=_json("scan", nested=CommunityScan))
    indexer: CommunityIndexer = field(default_factory=CommunityIndexer, metadata=_json("indexer", nested=CommunityIndexer))
    ipfs: CommunityIPFS = field(default_factory=CommunityIPFS, metadata=_json("ipfs", nested=CommunityIPFS))
    node: CommunityNode = field(default_factory=CommunityNode, metadata=_json("node", nested=CommunityNode))
    erc4337: CommunityERC4337 = field(default_factory=CommunityERC4337, metadata=_json("erc4337", nested=CommunityERC4337))
    token: CommunityToken = field(default_factory=CommunityToken, metadata=_json("token", nested=CommunityToken))
    profile: CommunityProfile = field(default_factory=CommunityProfile, metadata=_json("profile", nested=CommunityProfile))
    plugins: list[CommunityPlugin] = field(default_factory=list, metadata=_json("plugins", True, CommunityPlugin, True))
    version: int = field(default=0, metadata=_json("version"))

    def to_dict(self) -> dict[str, Any]:
        return _to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CommunityConfig:
        return _from_dict(cls, data)


@dataclass
class Profile(_JsonModel):
    account: str = field(default="", metadata=_json("account"))
    username: str = field(default="", metadata=_json("username"))
    name: str = field(default="", metadata=_json("name"))
    description: str = field(default="", metadata=_json("description"))
    image: str = field(default="", metadata=_json("image"))
    image_medium: str = field(default="", metadata=_json("image_medium"))
    image_small: str = field(default="", metadata=_json("image_small"))


@dataclass
class Sponsor(_JsonModel):
    contract: str = field(default="", metadata=_json("contract"))
    # The wire name is the field name itself.
    private_key: str = field(default_factory=str)
    created_at: Optional[datetime] = field(default=None, metadata=_json("created_at"))
    updated_at: Optional[datetime] = field(default=None, metadata=_json("updated_at"))