from pydantic import BaseModel, ConfigDict, Field


class AddonModel(BaseModel):
    """Base for add-on protocol payloads (camelCase on the wire)"""
    model_config = ConfigDict(populate_by_name=True)


class MetaPreview(AddonModel):
    """Catalog entry for a single channel"""
    id: str = Field(..., description="Channel id (channel-<index>)")
    type: str = "tv"
    name: str
    logo: str | None = None
    poster: str | None = Field(None, description="Poster image URL")
    background: str | None = Field(None, description="Background image URL")
    description: str = ""


class CatalogResponse(AddonModel):
    metas: list[MetaPreview] = Field(default_factory=list)


class ProxyHeaders(AddonModel):
    request: dict[str, str] = Field(..., description="Headers the player sends when fetching the stream")


class BehaviorHints(AddonModel):
    not_web_ready: bool = Field(False, alias="notWebReady")
    proxy_headers: ProxyHeaders = Field(..., alias="proxyHeaders")


class Stream(AddonModel):
    """Playable stream description"""
    title: str
    url: str
    type: str = "url"
    media_type: str = Field(..., alias="mimetype", description="MIME type derived from the URL suffix")
    behavior_hints: BehaviorHints = Field(..., alias="behaviorHints")

    @property
    def request_headers(self) -> dict[str, str]:
        return self.behavior_hints.proxy_headers.request


class StreamResponse(AddonModel):
    streams: list[Stream] = Field(default_factory=list)


class Meta(AddonModel):
    """Channel detail with now/next programming"""
    id: str
    type: str = "tv"
    name: str
    logo: str | None = None
    poster: str | None = None
    background: str | None = None
    description: str | None = None


class MetaResponse(AddonModel):
    meta: Meta
