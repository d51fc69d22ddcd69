"""Value types produced by product page extraction."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


class ExtractionStrategy(str, Enum):
    """Which embedded-data convention a product was recovered from."""

    DATA_PRODUCT_JSON = "data-product-json"  # <script data-product-json>{...}</script>
    META_VARIABLE = "meta-variable"  # var meta = {product: {...}}
    PRODUCT_VARIABLE = "product-variable"  # var product = {...} and friends
    GENERIC_ASSIGNMENT = "generic-assignment"  # ShopifyAnalytics.meta...
    JSON_LD = "json-ld"  # schema.org Product in ld+json


class VideoFormat(str, Enum):
    """Video container / host classification."""

    MP4 = "mp4"
    WEBM = "webm"
    M3U8 = "m3u8"
    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ScriptTag:
    """An inline script element pulled out of a page."""

    type: Optional[str]
    attributes: dict[str, str] = field(default_factory=dict)
    content: str = ""


@dataclass(frozen=True)
class VariantData:
    """A purchasable variant, with prices kept as canonical text."""

    id: Optional[int] = None
    title: str = "Default"
    price: str = "0.00"
    compare_at_price: Optional[str] = None
    available: bool = True
    sku: Optional[str] = None


@dataclass(frozen=True)
class VideoData:
    """A product video as found on the page."""

    src: str
    format: VideoFormat = VideoFormat.UNKNOWN
    height: Optional[int] = None
    alt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "VideoData":
        """Create video from dictionary."""
        return cls(
            src=data["src"],
            format=VideoFormat(data.get("format", "unknown")),
            height=data.get("height"),
            alt=data.get("alt"),
        )


@dataclass(frozen=True)
class ProductData:
    """Canonical product data, independent of the strategy that found it."""

    title: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    variants: list[VariantData] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    videos: list[VideoData] = field(default_factory=list)
    raw_price: Optional[str] = None

    @classmethod
    def build(
        cls,
        title: Optional[str] = None,
        vendor: Optional[str] = None,
        product_type: Optional[str] = None,
        variants: Optional[list[VariantData]] = None,
        images: Optional[list[str]] = None,
        videos: Optional[list[VideoData]] = None,
    ) -> "ProductData":
        """Create product data with raw_price mirroring the first variant."""
        variants = list(variants or [])
        return cls(
            title=title,
            vendor=vendor,
            product_type=product_type,
            variants=variants,
            images=list(images or []),
            videos=list(videos or []),
            raw_price=variants[0].price if variants else None,
        )

    def to_dict(self) -> dict:
        """Convert product to a JSON-ready dictionary."""
        data = asdict(self)
        data["videos"] = [
            {**video, "format": video["format"].value} for video in data["videos"]
        ]
        return data


@dataclass(frozen=True)
class ExtractionResult:
    """Product data plus the strategy that produced it."""

    strategy: ExtractionStrategy
    product: ProductData

    def to_dict(self) -> dict:
        """Convert result to a JSON-ready dictionary."""
        return {
            "strategy": self.strategy.value,
            "product": self.product.to_dict(),
        }
