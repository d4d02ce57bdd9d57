import dataclasses
from typing import List
from urllib.parse import quote


# ==============================================================================
#  Base Message class
# ==============================================================================

@dataclasses.dataclass
class Message:
    """Base for all JSON payloads. Provides dict serialization."""

    def model_dump(self) -> dict:
        return dataclasses.asdict(self)


# ==============================================================================
#  Latest photos feed
# ==============================================================================

@dataclasses.dataclass
class LatestPhotoEntry(Message):
    date: str = ""
    filename: str = ""
    url: str = ""
    thumbnail: str = ""

    @classmethod
    def from_photo(cls, photo) -> "LatestPhotoEntry":
        path = f"{quote(photo.folder.key)}/{quote(photo.filename)}"
        return cls(
            date=photo.folder.date.isoformat(),
            filename=photo.filename,
            url=f"/photos/{path}",
            thumbnail=f"/thumbnails/{path}",
        )


@dataclasses.dataclass
class LatestPhotosResponse(Message):
    latest: List[LatestPhotoEntry] = dataclasses.field(default_factory=list)
