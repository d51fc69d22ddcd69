"""Reconcile scraped product videos against stored ones."""

from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional, Sequence

from storewatch.ingest.base import VideoData, VideoFormat


@dataclass(frozen=True)
class ExistingVideo:
    """A stored video record."""

    id: int
    src: str
    is_removed: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ExistingVideo":
        """Create stored video record from dictionary."""
        return cls(
            id=data["id"],
            src=data["src"],
            is_removed=data.get("is_removed", False),
        )


@dataclass(frozen=True)
class VideoInsert:
    src: str
    format: VideoFormat
    height: Optional[int]
    alt: Optional[str]
    position: int


@dataclass(frozen=True)
class VideoUpdate:
    id: int
    position: int
    format: VideoFormat
    height: Optional[int]
    alt: Optional[str]


@dataclass(frozen=True)
class VideoSoftDelete:
    id: int


@dataclass(frozen=True)
class VideoDiffResult:
    """Write operations that bring stored videos in line with the page."""

    to_insert: List[VideoInsert] = field(default_factory=list)
    to_update: List[VideoUpdate] = field(default_factory=list)
    to_soft_delete: List[VideoSoftDelete] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert diff to a JSON-ready dictionary."""
        return {
            "to_insert": [
                {**asdict(op), "format": op.format.value} for op in self.to_insert
            ],
            "to_update": [
                {**asdict(op), "format": op.format.value} for op in self.to_update
            ],
            "to_soft_delete": [asdict(op) for op in self.to_soft_delete],
        }


def compute_video_diff(
    existing: Iterable[ExistingVideo],
    scraped: Sequence[VideoData],
) -> VideoDiffResult:
    """
    Diff stored videos against the videos currently on the page.

    Videos are matched by source URL. Positions always follow page order,
    so reordering on the page is reflected. Stored videos missing from the
    page are soft-deleted unless already removed.

    Args:
        existing: Stored video records (removed ones included)
        scraped: Videos in page order

    Returns:
        VideoDiffResult
    """
    existing = list(existing)
    existing_by_src = {video.src: video for video in existing}
    scraped_srcs = {video.src for video in scraped}

    to_insert = []
    to_update = []

    for position, video in enumerate(scraped):
        match = existing_by_src.get(video.src)
        if match is not None:
            to_update.append(VideoUpdate(
                id=match.id,
                position=position,
                format=video.format,
                height=video.height,
                alt=video.alt,
            ))
        else:
            to_insert.append(VideoInsert(
                src=video.src,
                format=video.format,
                height=video.height,
                alt=video.alt,
                position=position,
            ))

    to_soft_delete = [
        VideoSoftDelete(id=video.id)
        for video in existing
        if video.src not in scraped_srcs and not video.is_removed
    ]

    return VideoDiffResult(
        to_insert=to_insert,
        to_update=to_update,
        to_soft_delete=to_soft_delete,
    )
