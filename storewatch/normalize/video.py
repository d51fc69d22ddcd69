"""Video extraction from storefront media arrays."""

from typing import Any, List, Optional

from storewatch.ingest.base import VideoData, VideoFormat

EXTERNAL_HOSTS = {
    "youtube": VideoFormat.YOUTUBE,
    "vimeo": VideoFormat.VIMEO,
}


def detect_video_format(src: str, explicit_format: Optional[str] = None) -> VideoFormat:
    """
    Classify a video by its declared format or, failing that, its URL.

    Args:
        src: Video URL
        explicit_format: Format or MIME type declared next to the URL

    Returns:
        VideoFormat
    """
    if isinstance(explicit_format, str) and explicit_format:
        declared = explicit_format.lower()
        if "mp4" in declared:
            return VideoFormat.MP4
        if "webm" in declared:
            return VideoFormat.WEBM
        if "m3u8" in declared or "hls" in declared:
            return VideoFormat.M3U8

    url = src.lower()
    if "youtube.com" in url or "youtu.be" in url:
        return VideoFormat.YOUTUBE
    if "vimeo.com" in url:
        return VideoFormat.VIMEO
    if ".mp4" in url:
        return VideoFormat.MP4
    if ".webm" in url:
        return VideoFormat.WEBM
    if ".m3u8" in url:
        return VideoFormat.M3U8
    return VideoFormat.UNKNOWN


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _first_url(item: dict, *keys: str) -> str:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value if isinstance(value, str) else ""
    return ""


def extract_videos(media: Any) -> List[VideoData]:
    """
    Extract videos from a product ``media`` array.

    Handles external videos (``host`` youtube/vimeo), native videos with a
    ``sources`` list (one VideoData per source) and bare video items with a
    direct URL. Non-video media (images, 3D models) are skipped.
    """
    if not isinstance(media, list):
        return []

    videos = []

    for item in media:
        if not isinstance(item, dict):
            continue

        media_type = item.get("media_type")
        if media_type is None:
            media_type = item.get("type", "")
        if not isinstance(media_type, str) or "video" not in media_type.lower():
            continue

        height = _int_or_none(item.get("height"))
        alt = _str_or_none(item.get("alt"))

        host = item.get("host")
        if isinstance(host, str) and host in EXTERNAL_HOSTS:
            src = _first_url(item, "embed_url", "external_url", "url", "src")
            if src:
                videos.append(VideoData(
                    src=src,
                    format=EXTERNAL_HOSTS[host],
                    height=height,
                    alt=alt,
                ))
            continue

        sources = item.get("sources")
        if sources is None:
            sources = item.get("src_set", [])

        if isinstance(sources, list) and sources:
            for source in sources:
                if not isinstance(source, dict):
                    continue
                src = _first_url(source, "url", "src")
                if not src:
                    continue
                declared = source.get("format")
                if declared is None:
                    declared = source.get("mime_type")
                source_height = _int_or_none(source.get("height"))
                videos.append(VideoData(
                    src=src,
                    format=detect_video_format(src, declared),
                    height=source_height if source_height is not None else height,
                    alt=alt,
                ))
        else:
            src = _first_url(item, "url", "src")
            if src:
                videos.append(VideoData(
                    src=src,
                    format=detect_video_format(src),
                    height=height,
                    alt=alt,
                ))

    return videos
